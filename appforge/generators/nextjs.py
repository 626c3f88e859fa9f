"""Next.js (App Router) generator."""

from __future__ import annotations

from typing import Any

from appforge.models import Configuration, GeneratedFile, Platform

from .base import FrameworkGenerator
from .react import web_deployment


class NextJSGenerator(FrameworkGenerator):
    platform = Platform.WEB
    framework = "nextjs"
    display_name = "Next.js"
    lib_dir = "lib"
    source_root = "."
    env_style = "next"

    def build_files(self, config: Configuration) -> list[GeneratedFile]:
        ctx = self.context(config)
        files = [
            self.render("app/layout.tsx", "nextjs/layout.tsx.j2", ctx),
            self.render("app/page.tsx", "nextjs/page.tsx.j2", ctx),
            self.render("app/globals.css", "shared/styles.css.j2", ctx),
            self.render("next.config.js", "nextjs/next.config.js.j2", ctx),
            self.render("next-env.d.ts", "nextjs/next-env.d.ts.j2", ctx),
            self.json_file("tsconfig.json", self.tsconfig()),
        ]

        if config.has_feature("authentication"):
            ctx_auth = {**ctx, "persist_session": True, "client_directive": True}
            files.append(
                self.render("components/AuthProvider.tsx", "shared/AuthProvider.tsx.j2", ctx_auth)
            )
        if config.has_feature("api"):
            files.append(self.render("app/api/health/route.ts", "nextjs/health-route.ts.j2", ctx))

        files.extend(self.lib_files(config, ctx))
        return files

    def tsconfig(self) -> dict[str, Any]:
        return {
            "compilerOptions": {
                "target": "ES2017",
                "lib": ["dom", "dom.iterable", "esnext"],
                "allowJs": True,
                "skipLibCheck": True,
                "noEmit": True,
                "esModuleInterop": True,
                "module": "esnext",
                "moduleResolution": "bundler",
                "resolveJsonModule": True,
                "isolatedModules": True,
                "jsx": "preserve",
                "incremental": True,
                "plugins": [{"name": "next"}],
                "paths": {"@/*": ["./*"]},
            },
            "include": ["next-env.d.ts", "**/*.ts", "**/*.tsx", ".next/types/**/*.ts"],
            "exclude": ["node_modules"],
        }

    def build_manifest(self, config: Configuration, files: list[GeneratedFile]) -> dict[str, Any]:
        manifest = self.package_base(config)
        manifest["scripts"] = {
            "dev": "next dev",
            "build": "next build",
            "start": "next start",
        }
        manifest["dependencies"] = {
            "next": "14.1.4",
            "react": "^18.2.0",
            "react-dom": "^18.2.0",
        }
        manifest["devDependencies"] = {
            "@types/node": "^20.11.30",
            "@types/react": "^18.2.66",
            "@types/react-dom": "^18.2.22",
            "typescript": "^5.4.2",
        }
        return manifest

    def build_deployment_descriptors(self, config: Configuration) -> dict[str, Any]:
        return web_deployment(config, build_output=".next")
