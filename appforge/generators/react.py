"""React + Vite single-page application generator."""

from __future__ import annotations

from typing import Any

from appforge.models import Configuration, GeneratedFile, Platform

from .base import FrameworkGenerator


class ReactGenerator(FrameworkGenerator):
    platform = Platform.WEB
    framework = "react"
    display_name = "React"
    env_style = "vite"

    def build_files(self, config: Configuration) -> list[GeneratedFile]:
        ctx = self.context(config)
        files = [
            self.render("src/App.tsx", "react/App.tsx.j2", ctx),
            self.render("src/main.tsx", "react/main.tsx.j2", ctx),
            self.render("src/App.css", "react/App.css.j2", ctx),
            self.render("src/index.css", "shared/styles.css.j2", ctx),
            self.render("index.html", "react/index.html.j2", ctx),
            self.render("vite.config.ts", "react/vite.config.ts.j2", ctx),
            self.json_file("tsconfig.json", self.tsconfig()),
        ]

        if config.has_feature("authentication"):
            ctx_auth = {**ctx, "persist_session": True, "client_directive": False}
            files.append(
                self.render(
                    "src/components/Auth/AuthProvider.tsx", "shared/AuthProvider.tsx.j2", ctx_auth
                )
            )

        files.extend(self.lib_files(config, ctx))
        return files

    def tsconfig(self) -> dict[str, Any]:
        return {
            "compilerOptions": {
                "target": "ES2020",
                "useDefineForClassFields": True,
                "lib": ["ES2020", "DOM", "DOM.Iterable"],
                "module": "ESNext",
                "moduleResolution": "bundler",
                "resolveJsonModule": True,
                "isolatedModules": True,
                "noEmit": True,
                "jsx": "react-jsx",
                "skipLibCheck": True,
                "types": ["vite/client"],
            },
            "include": ["src"],
        }

    def build_manifest(self, config: Configuration, files: list[GeneratedFile]) -> dict[str, Any]:
        manifest = self.package_base(config)
        manifest["type"] = "module"
        manifest["scripts"] = {
            "dev": "vite",
            "build": "tsc && vite build",
            "preview": "vite preview",
        }
        manifest["dependencies"] = {
            "react": "^18.2.0",
            "react-dom": "^18.2.0",
        }
        if config.has_feature("api"):
            manifest["dependencies"]["@tanstack/react-query"] = "^5.28.0"
        manifest["devDependencies"] = {
            "@types/react": "^18.2.66",
            "@types/react-dom": "^18.2.22",
            "@vitejs/plugin-react": "^4.2.1",
            "typescript": "^5.4.2",
            "vite": "^5.2.0",
        }
        return manifest

    def build_deployment_descriptors(self, config: Configuration) -> dict[str, Any]:
        return web_deployment(config, build_output="dist")


def web_deployment(config: Configuration, build_output: str) -> dict[str, Any]:
    """Vercel and Netlify descriptors shared by the web generators."""
    return {
        "vercel": {
            "name": config.slug,
            "buildCommand": "npm run build",
            "outputDirectory": build_output,
        },
        "netlify": {
            "build": {
                "command": "npm run build",
                "publish": build_output,
            },
        },
    }
