"""Electron desktop generator."""

from __future__ import annotations

from typing import Any

from appforge.models import Configuration, GeneratedFile, Platform

from .base import FrameworkGenerator
from .react_native import bundle_identifier


class ElectronGenerator(FrameworkGenerator):
    platform = Platform.DESKTOP
    framework = "electron"
    display_name = "Electron"
    dev_command = "npm start"
    build_command = "npm run dist"

    def build_files(self, config: Configuration) -> list[GeneratedFile]:
        ctx = self.context(config)
        files = [
            self.render("src/main.ts", "electron/main.ts.j2", ctx),
            self.render("src/preload.ts", "electron/preload.ts.j2", ctx),
            self.render("src/renderer.ts", "electron/renderer.ts.j2", ctx),
            self.render("src/index.html", "electron/index.html.j2", ctx),
            self.render("src/styles.css", "shared/styles.css.j2", ctx),
            self.json_file("tsconfig.json", self.tsconfig()),
        ]
        if config.has_feature("authentication"):
            files.append(self.render(f"{self.lib_dir}/auth.ts", "shared/lib/auth.ts.j2", ctx))
        files.extend(self.lib_files(config, ctx))
        return files

    def tsconfig(self) -> dict[str, Any]:
        return {
            "compilerOptions": {
                "target": "ES2020",
                "module": "commonjs",
                "lib": ["ES2020", "DOM", "DOM.Iterable"],
                "outDir": "dist",
                "rootDir": "src",
                "esModuleInterop": True,
                "skipLibCheck": True,
                "sourceMap": True,
            },
            "include": ["src/**/*.ts"],
        }

    def builder_config(self, config: Configuration) -> dict[str, Any]:
        """``electron-builder`` settings, also embedded in ``package.json``."""
        return {
            "appId": bundle_identifier(config),
            "productName": config.name,
            "directories": {"output": "release"},
            "files": ["dist/**/*", "src/index.html", "src/styles.css"],
            "mac": {"target": ["dmg"]},
            "win": {"target": ["nsis"]},
            "linux": {"target": ["AppImage"]},
        }

    def build_manifest(self, config: Configuration, files: list[GeneratedFile]) -> dict[str, Any]:
        manifest = self.package_base(config)
        manifest["main"] = "dist/main.js"
        manifest["scripts"] = {
            "build": "tsc",
            "build:watch": "tsc --watch",
            "start": "npm run build && electron .",
            "dev": 'concurrently "npm run build:watch" "npm run start:electron"',
            "start:electron": "wait-on dist/main.js && electron .",
            "dist": "npm run build && electron-builder",
        }
        manifest["devDependencies"] = {
            "@types/node": "^20.11.30",
            "concurrently": "^8.2.2",
            "electron": "^29.1.5",
            "electron-builder": "^24.13.3",
            "typescript": "^5.4.2",
            "wait-on": "^7.2.0",
        }
        manifest["build"] = self.builder_config(config)
        return manifest

    def build_deployment_descriptors(self, config: Configuration) -> dict[str, Any]:
        return {"electron-builder": self.builder_config(config)}
