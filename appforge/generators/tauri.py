"""Tauri desktop generator (Vite front end, Rust shell)."""

from __future__ import annotations

import re
from typing import Any

from appforge.models import Configuration, GeneratedFile, Platform

from .base import FrameworkGenerator
from .react_native import bundle_identifier

CONTENT_SECURITY_POLICY = "default-src 'self'; img-src 'self' asset: https://asset.localhost"


class TauriGenerator(FrameworkGenerator):
    platform = Platform.DESKTOP
    framework = "tauri"
    display_name = "Tauri"
    env_style = "vite"
    dev_command = "npm run tauri dev"
    build_command = "npm run tauri build"

    def build_files(self, config: Configuration) -> list[GeneratedFile]:
        ctx = self.context(config)
        ctx["crate_name"] = self.crate_name(config)
        files = [
            self.render("src/main.ts", "tauri/main.ts.j2", ctx),
            self.render("src/styles.css", "shared/styles.css.j2", ctx),
            self.render("index.html", "tauri/index.html.j2", ctx),
            self.render("vite.config.ts", "tauri/vite.config.ts.j2", ctx),
            self.json_file("tsconfig.json", self.tsconfig()),
            self.json_file("src-tauri/tauri.conf.json", self.tauri_config(config)),
            self.render("src-tauri/Cargo.toml", "tauri/Cargo.toml.j2", ctx),
            self.render("src-tauri/build.rs", "tauri/build.rs.j2", ctx),
            self.render("src-tauri/src/main.rs", "tauri/main.rs.j2", ctx),
        ]
        if config.has_feature("authentication"):
            files.append(self.render(f"{self.lib_dir}/auth.ts", "shared/lib/auth.ts.j2", ctx))
        files.extend(self.lib_files(config, ctx))
        return files

    @staticmethod
    def crate_name(config: Configuration) -> str:
        name = re.sub(r"[^a-z0-9_-]", "", config.slug)
        if not name or not name[0].isalpha():
            name = f"app-{name}".rstrip("-")
        return name

    def tsconfig(self) -> dict[str, Any]:
        return {
            "compilerOptions": {
                "target": "ES2021",
                "useDefineForClassFields": True,
                "module": "ESNext",
                "lib": ["ES2021", "DOM", "DOM.Iterable"],
                "moduleResolution": "bundler",
                "resolveJsonModule": True,
                "isolatedModules": True,
                "noEmit": True,
                "skipLibCheck": True,
                "types": ["vite/client"],
            },
            "include": ["src"],
        }

    def bundle_config(self, config: Configuration) -> dict[str, Any]:
        return {
            "active": True,
            "targets": "all",
            "identifier": bundle_identifier(config),
        }

    def tauri_config(self, config: Configuration) -> dict[str, Any]:
        return {
            "build": {
                "beforeDevCommand": "npm run dev",
                "beforeBuildCommand": "npm run build",
                "devPath": "http://localhost:1420",
                "distDir": "../dist",
                "withGlobalTauri": False,
            },
            "package": {
                "productName": config.name,
                "version": "0.1.0",
            },
            "tauri": {
                "allowlist": {
                    "all": False,
                    "shell": {"all": False, "open": True},
                },
                "bundle": self.bundle_config(config),
                "security": {"csp": CONTENT_SECURITY_POLICY},
                "windows": [
                    {
                        "fullscreen": False,
                        "resizable": True,
                        "title": config.name,
                        "width": 800,
                        "height": 600,
                    }
                ],
            },
        }

    def build_manifest(self, config: Configuration, files: list[GeneratedFile]) -> dict[str, Any]:
        manifest = self.package_base(config)
        manifest["type"] = "module"
        manifest["scripts"] = {
            "dev": "vite",
            "build": "tsc && vite build",
            "preview": "vite preview",
            "tauri": "tauri",
        }
        manifest["devDependencies"] = {
            "@tauri-apps/cli": "^1.5.11",
            "typescript": "^5.4.2",
            "vite": "^5.2.0",
        }
        return manifest

    def build_deployment_descriptors(self, config: Configuration) -> dict[str, Any]:
        return {
            "tauri-bundle": {
                **self.bundle_config(config),
                "productName": config.name,
                "buildCommand": "npm run tauri build",
                "artifacts": "src-tauri/target/release/bundle",
            }
        }
