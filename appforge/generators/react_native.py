"""React Native (bare CLI) generator."""

from __future__ import annotations

import re
from typing import Any

from appforge.models import Configuration, GeneratedFile, Platform

from .base import FrameworkGenerator


def bundle_identifier(config: Configuration) -> str:
    """Reverse-DNS application id, e.g. ``com.appforge.myapp``."""
    token = re.sub(r"[^a-z0-9]", "", config.slug.lower()) or "app"
    if token[0].isdigit():
        token = f"app{token}"
    return f"com.appforge.{token}"


class ReactNativeGenerator(FrameworkGenerator):
    platform = Platform.MOBILE
    framework = "react-native"
    display_name = "React Native"
    source_root = "."
    dev_command = "npm run start"
    build_command = "npm run android"

    def build_files(self, config: Configuration) -> list[GeneratedFile]:
        ctx = self.context(config)
        files = [
            self.render("App.tsx", "react_native/App.tsx.j2", ctx),
            self.render("index.js", "react_native/index.js.j2", ctx),
            self.json_file("app.json", {"name": self.app_name(config), "displayName": config.name}),
            self.render("metro.config.js", "react_native/metro.config.js.j2", ctx),
            self.render("babel.config.js", "react_native/babel.config.js.j2", ctx),
            self.json_file("tsconfig.json", {"extends": "@react-native/typescript-config/tsconfig.json"}),
        ]
        if config.has_feature("authentication"):
            ctx_auth = {**ctx, "persist_session": False, "client_directive": False}
            files.append(
                self.render("src/auth/AuthProvider.tsx", "shared/AuthProvider.tsx.j2", ctx_auth)
            )
        files.extend(self.lib_files(config, ctx))
        return files

    @staticmethod
    def app_name(config: Configuration) -> str:
        """Registered component name; must match the native projects."""
        parts = re.split(r"[^A-Za-z0-9]+", config.name)
        name = "".join(p[:1].upper() + p[1:] for p in parts if p)
        if not name or name[0].isdigit():
            name = f"App{name}"
        return name

    def build_manifest(self, config: Configuration, files: list[GeneratedFile]) -> dict[str, Any]:
        manifest = self.package_base(config)
        manifest["scripts"] = {
            "android": "react-native run-android",
            "ios": "react-native run-ios",
            "start": "react-native start",
        }
        manifest["dependencies"] = {
            "react": "18.2.0",
            "react-native": "0.73.6",
        }
        manifest["devDependencies"] = {
            "@babel/core": "^7.20.0",
            "@babel/preset-env": "^7.20.0",
            "@babel/runtime": "^7.20.0",
            "@react-native/babel-preset": "0.73.21",
            "@react-native/metro-config": "0.73.5",
            "@react-native/typescript-config": "0.73.1",
            "@types/react": "^18.2.6",
            "typescript": "5.0.4",
        }
        return manifest

    def build_deployment_descriptors(self, config: Configuration) -> dict[str, Any]:
        app_id = bundle_identifier(config)
        return {
            "android": {
                "applicationId": app_id,
                "buildCommand": "cd android && ./gradlew bundleRelease",
                "artifact": "android/app/build/outputs/bundle/release/app-release.aab",
            },
            "ios": {
                "bundleIdentifier": app_id,
                "scheme": self.app_name(config),
                "buildCommand": (
                    f"xcodebuild -workspace ios/{self.app_name(config)}.xcworkspace "
                    f"-scheme {self.app_name(config)} -configuration Release archive"
                ),
            },
        }
