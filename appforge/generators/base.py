"""Common base for framework generators.

A generator turns a :class:`~appforge.models.Configuration` into a
:class:`~appforge.models.GenerationResult`: a virtual file tree, a manifest,
a readme and optional deployment descriptors.  Generators are pure: the same
configuration always yields byte-identical output and nothing outside the
returned result is touched.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Optional

from appforge.models import (
    Configuration,
    ConfigurationError,
    GeneratedFile,
    GenerationResult,
    Platform,
)

from .templates import TemplateRenderer

# Features backed by a standalone module under the generator's lib directory,
# in emission order.
LIB_FEATURES: tuple[str, ...] = ("api", "database", "realtime", "analytics", "payments")

_ENV_PREFIXES: dict[str, str] = {
    "vite": "import.meta.env.VITE_",
    "next": "process.env.NEXT_PUBLIC_",
}


def json_content(data: Any) -> str:
    """Serialise *data* the way every generated JSON file is written."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


class FrameworkGenerator(ABC):
    """Produces the scaffold for one ``(platform, framework)`` pair.

    Subclasses set the class attributes and implement :meth:`build_files`
    and :meth:`build_manifest`.  :meth:`generate` appends the manifest file
    and ``README.md`` to the emitted files.
    """

    platform: ClassVar[Platform]
    framework: ClassVar[str]
    display_name: ClassVar[str]
    manifest_path: ClassVar[str] = "package.json"
    # Where shared TypeScript modules live, relative to the project root.
    lib_dir: ClassVar[str] = "src/lib"
    # Root aliased as ``@/`` by the strict tsconfig.
    source_root: ClassVar[str] = "src"
    # How environment variables are read in browser code; None inlines defaults.
    env_style: ClassVar[Optional[str]] = None
    install_command: ClassVar[str] = "npm install"
    dev_command: ClassVar[str] = "npm run dev"
    build_command: ClassVar[str] = "npm run build"

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    # -- Contract ----------------------------------------------------------

    @abstractmethod
    def build_files(self, config: Configuration) -> list[GeneratedFile]:
        """Return the scaffold files, excluding the manifest and readme."""

    @abstractmethod
    def build_manifest(self, config: Configuration, files: list[GeneratedFile]) -> dict[str, Any]:
        """Return the structured manifest for the emitted *files*."""

    def build_deployment_descriptors(self, config: Configuration) -> Optional[dict[str, Any]]:
        return None

    def render_manifest(self, manifest: dict[str, Any]) -> str:
        return json_content(manifest)

    def build_readme(self, config: Configuration, files: list[GeneratedFile]) -> str:
        context = self.context(config)
        context["paths"] = [f.path for f in files] + [self.manifest_path]
        return self.renderer.render("shared/README.md.j2", context)

    # -- Entry point -------------------------------------------------------

    def generate(self, config: Configuration) -> GenerationResult:
        """Build the complete result for *config*.

        Raises:
            ConfigurationError: If *config* targets a different framework,
                or a path would be emitted twice.
        """
        if config.platform != self.platform or config.framework != self.framework:
            raise ConfigurationError(
                f"{type(self).__name__} cannot generate "
                f"{config.platform.value}/{config.framework}"
            )

        files = self.build_files(config)
        manifest = self.build_manifest(config, files)
        readme = self.build_readme(config, files)
        files = [
            *files,
            GeneratedFile(path=self.manifest_path, content=self.render_manifest(manifest)),
            GeneratedFile(path="README.md", content=readme),
        ]

        seen: set[str] = set()
        for generated in files:
            if generated.path in seen:
                raise ConfigurationError(f"Duplicate generated path: {generated.path}")
            seen.add(generated.path)

        return GenerationResult(
            files=files,
            manifest=manifest,
            readme=readme,
            deployment_descriptors=self.build_deployment_descriptors(config),
        )

    # -- Helpers for subclasses --------------------------------------------

    def context(self, config: Configuration) -> dict[str, Any]:
        """Template context shared by every file of one generation."""
        return {
            "name": config.name,
            "description": config.description
            or f"A {self.display_name} application generated by appforge",
            "slug": config.slug,
            "platform": config.platform.value,
            "framework": self.framework,
            "display_name": self.display_name,
            "features": list(config.features),
            "env_style": self.env_style,
            "env_var": self.env_var,
            "lib_dir": self.lib_dir,
            "install_command": self.install_command,
            "dev_command": self.dev_command,
            "build_command": self.build_command,
        }

    def env_var(self, name: str) -> str:
        """JavaScript expression reading environment variable *name*."""
        prefix = _ENV_PREFIXES.get(self.env_style or "")
        return f"{prefix}{name}" if prefix else "undefined"

    def render(self, path: str, template: str, context: dict[str, Any]) -> GeneratedFile:
        return GeneratedFile(path=path, content=self.renderer.render(template, context))

    def json_file(self, path: str, data: Any) -> GeneratedFile:
        return GeneratedFile(path=path, content=json_content(data))

    def lib_files(self, config: Configuration, context: dict[str, Any]) -> list[GeneratedFile]:
        """Shared TypeScript modules for the enabled library features."""
        return [
            self.render(f"{self.lib_dir}/{feature}.ts", f"shared/lib/{feature}.ts.j2", context)
            for feature in LIB_FEATURES
            if config.has_feature(feature)
        ]

    def package_base(self, config: Configuration) -> dict[str, Any]:
        """Fields common to every ``package.json``."""
        return {
            "name": config.slug,
            "private": True,
            "version": "0.1.0",
            "description": config.description
            or f"A {self.display_name} application generated by appforge",
        }
