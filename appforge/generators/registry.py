"""Closed mapping from ``(platform, framework)`` to generators.

The registry is validated against ``FRAMEWORKS_BY_PLATFORM`` when it is
built, so a supported pair without a generator (or a generator for an
unsupported pair) fails at start-up rather than on first use.
"""

from __future__ import annotations

from typing import Iterable

from appforge.models import (
    FRAMEWORKS_BY_PLATFORM,
    Configuration,
    ConfigurationError,
    GenerationResult,
    Platform,
)

from .base import FrameworkGenerator
from .electron import ElectronGenerator
from .flutter import FlutterGenerator
from .nextjs import NextJSGenerator
from .react import ReactGenerator
from .react_native import ReactNativeGenerator
from .svelte import SvelteGenerator
from .tauri import TauriGenerator
from .templates import TemplateRenderer

GeneratorKey = tuple[Platform, str]


def supported_pairs() -> list[GeneratorKey]:
    """Every supported ``(platform, framework)`` pair, in declaration order."""
    return [
        (platform, framework)
        for platform, frameworks in FRAMEWORKS_BY_PLATFORM.items()
        for framework in frameworks
    ]


class GeneratorRegistry:
    """Exhaustive dispatch table of framework generators.

    Raises:
        ConfigurationError: At construction, if a pair is registered twice,
            is missing, or is not a supported pair.
    """

    def __init__(self, generators: Iterable[FrameworkGenerator]) -> None:
        mapping: dict[GeneratorKey, FrameworkGenerator] = {}
        for generator in generators:
            key = (generator.platform, generator.framework)
            if key in mapping:
                raise ConfigurationError(
                    f"Duplicate generator for {key[0].value}/{key[1]}"
                )
            mapping[key] = generator

        expected = supported_pairs()
        missing = [k for k in expected if k not in mapping]
        extra = [k for k in mapping if k not in expected]
        if missing or extra:
            problems = []
            if missing:
                problems.append("missing " + ", ".join(f"{p.value}/{f}" for p, f in missing))
            if extra:
                problems.append("unsupported " + ", ".join(f"{p.value}/{f}" for p, f in extra))
            raise ConfigurationError(f"Invalid generator registry: {'; '.join(problems)}")

        self._generators = mapping

    def get(self, platform: Platform | str, framework: str) -> FrameworkGenerator:
        """Return the generator for a pair.

        Raises:
            ConfigurationError: For an unknown platform or framework.
        """
        try:
            resolved = Platform(platform)
        except ValueError:
            raise ConfigurationError(f"Unknown platform: {platform}") from None
        generator = self._generators.get((resolved, framework))
        if generator is None:
            raise ConfigurationError(
                f"Unknown framework '{framework}' for platform '{resolved.value}'"
            )
        return generator

    def resolve(self, config: Configuration) -> FrameworkGenerator:
        """Validate *config* and return its generator."""
        config.check()
        return self.get(config.platform, config.framework)

    def generate(self, config: Configuration) -> GenerationResult:
        return self.resolve(config).generate(config)

    def pairs(self) -> list[GeneratorKey]:
        return [k for k in supported_pairs() if k in self._generators]

    def __len__(self) -> int:
        return len(self._generators)


def default_registry(renderer: TemplateRenderer | None = None) -> GeneratorRegistry:
    """Registry with the seven built-in generators sharing one renderer."""
    renderer = renderer or TemplateRenderer()
    return GeneratorRegistry(
        [
            ReactGenerator(renderer),
            NextJSGenerator(renderer),
            SvelteGenerator(renderer),
            ReactNativeGenerator(renderer),
            FlutterGenerator(renderer),
            ElectronGenerator(renderer),
            TauriGenerator(renderer),
        ]
    )
