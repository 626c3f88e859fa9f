"""Flutter generator.

Unlike the JavaScript generators, the manifest is ``pubspec.yaml`` and
feature modules are Dart services under ``lib/services``.
"""

from __future__ import annotations

import re
from typing import Any

import yaml

from appforge.models import Configuration, GeneratedFile, Platform

from .base import FrameworkGenerator
from .react_native import bundle_identifier

# feature -> (service file, template)
SERVICE_FILES: dict[str, tuple[str, str]] = {
    "authentication": ("auth_service.dart", "flutter/services/auth_service.dart.j2"),
    "api": ("api_client.dart", "flutter/services/api_client.dart.j2"),
    "database": ("database.dart", "flutter/services/database.dart.j2"),
    "realtime": ("realtime.dart", "flutter/services/realtime.dart.j2"),
    "analytics": ("analytics.dart", "flutter/services/analytics.dart.j2"),
    "payments": ("payments.dart", "flutter/services/payments.dart.j2"),
}

# Pub packages imported by each service.
FEATURE_PACKAGES: dict[str, dict[str, str]] = {
    "authentication": {"http": "^1.2.1"},
    "api": {"http": "^1.2.1"},
    "database": {"sqflite": "^2.3.2", "path": "^1.9.0"},
    "realtime": {"web_socket_channel": "^2.4.4"},
    "analytics": {"http": "^1.2.1"},
    "payments": {"http": "^1.2.1", "url_launcher": "^6.2.5"},
}

NETWORK_FEATURES = frozenset({"authentication", "api", "realtime", "analytics", "payments"})


def dart_package_name(name: str) -> str:
    """Pub package name: lowercase identifier with underscores."""
    result = re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")
    if not result or result[0].isdigit():
        result = f"app_{result}".rstrip("_")
    return result


class FlutterGenerator(FrameworkGenerator):
    platform = Platform.MOBILE
    framework = "flutter"
    display_name = "Flutter"
    manifest_path = "pubspec.yaml"
    lib_dir = "lib/services"
    source_root = "lib"
    install_command = "flutter pub get"
    dev_command = "flutter run"
    build_command = "flutter build appbundle"

    def build_files(self, config: Configuration) -> list[GeneratedFile]:
        ctx = self.context(config)
        ctx["needs_network"] = any(config.has_feature(f) for f in NETWORK_FEATURES)
        ctx["db_name"] = dart_package_name(config.name)

        files = [
            self.render("lib/main.dart", "flutter/main.dart.j2", ctx),
            self.render(
                "android/app/src/main/AndroidManifest.xml", "flutter/AndroidManifest.xml.j2", ctx
            ),
        ]
        for feature, (filename, template) in SERVICE_FILES.items():
            if config.has_feature(feature):
                files.append(self.render(f"{self.lib_dir}/{filename}", template, ctx))
        return files

    def build_manifest(self, config: Configuration, files: list[GeneratedFile]) -> dict[str, Any]:
        dependencies: dict[str, Any] = {"flutter": {"sdk": "flutter"}}
        extra: dict[str, str] = {}
        for feature in config.features:
            extra.update(FEATURE_PACKAGES.get(feature, {}))
        dependencies.update(sorted(extra.items()))

        return {
            "name": dart_package_name(config.name),
            "description": config.description
            or f"A {self.display_name} application generated by appforge",
            "publish_to": "none",
            "version": "1.0.0+1",
            "environment": {"sdk": ">=3.0.0 <4.0.0"},
            "dependencies": dependencies,
            "dev_dependencies": {
                "flutter_test": {"sdk": "flutter"},
                "flutter_lints": "^3.0.1",
            },
            "flutter": {"uses-material-design": True},
        }

    def render_manifest(self, manifest: dict[str, Any]) -> str:
        return yaml.safe_dump(manifest, sort_keys=False, allow_unicode=True, default_flow_style=False)

    def build_deployment_descriptors(self, config: Configuration) -> dict[str, Any]:
        app_id = bundle_identifier(config)
        return {
            "android": {
                "applicationId": app_id,
                "buildCommand": "flutter build appbundle --release",
                "artifact": "build/app/outputs/bundle/release/app-release.aab",
            },
            "ios": {
                "bundleIdentifier": app_id,
                "buildCommand": "flutter build ipa --release",
                "artifact": "build/ios/ipa",
            },
        }
