"""Svelte + Vite generator."""

from __future__ import annotations

from typing import Any

from appforge.models import Configuration, GeneratedFile, Platform

from .base import FrameworkGenerator
from .react import web_deployment


class SvelteGenerator(FrameworkGenerator):
    platform = Platform.WEB
    framework = "svelte"
    display_name = "Svelte"
    env_style = "vite"

    def build_files(self, config: Configuration) -> list[GeneratedFile]:
        ctx = self.context(config)
        files = [
            self.render("src/App.svelte", "svelte/App.svelte.j2", ctx),
            self.render("src/main.ts", "svelte/main.ts.j2", ctx),
            self.render("src/app.css", "shared/styles.css.j2", ctx),
            self.render("index.html", "svelte/index.html.j2", ctx),
            self.render("vite.config.ts", "svelte/vite.config.ts.j2", ctx),
            self.render("svelte.config.js", "svelte/svelte.config.js.j2", ctx),
            self.json_file("tsconfig.json", self.tsconfig()),
        ]
        if config.has_feature("authentication"):
            files.append(self.render(f"{self.lib_dir}/auth.ts", "shared/lib/auth.ts.j2", ctx))
        files.extend(self.lib_files(config, ctx))
        return files

    def tsconfig(self) -> dict[str, Any]:
        return {
            "extends": "@tsconfig/svelte/tsconfig.json",
            "compilerOptions": {
                "target": "ESNext",
                "useDefineForClassFields": True,
                "module": "ESNext",
                "resolveJsonModule": True,
                "allowJs": True,
                "checkJs": True,
                "isolatedModules": True,
                "types": ["svelte", "vite/client"],
            },
            "include": ["src/**/*.ts", "src/**/*.js", "src/**/*.svelte"],
        }

    def build_manifest(self, config: Configuration, files: list[GeneratedFile]) -> dict[str, Any]:
        manifest = self.package_base(config)
        manifest["type"] = "module"
        manifest["scripts"] = {
            "dev": "vite",
            "build": "vite build",
            "preview": "vite preview",
            "check": "svelte-check --tsconfig ./tsconfig.json",
        }
        manifest["dependencies"] = {
            "svelte": "^4.2.12",
        }
        manifest["devDependencies"] = {
            "@sveltejs/vite-plugin-svelte": "^3.0.2",
            "@tsconfig/svelte": "^5.0.2",
            "svelte-check": "^3.6.7",
            "typescript": "^5.4.2",
            "vite": "^5.2.0",
        }
        return manifest

    def build_deployment_descriptors(self, config: Configuration) -> dict[str, Any]:
        return web_deployment(config, build_output="dist")
