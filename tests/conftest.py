"""Shared pytest fixtures for the appforge test suite.

Provides reusable fixtures for:
- A fast ``Config`` with every delay disabled
- A recording ``sleep`` replacement
- In-memory task store, notification bus and queue observer
- Sample configurations for each platform
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import pytest

from appforge.config import Config, PacingConfig, RecoveryConfig, RetryConfig
from appforge.generators import TemplateRenderer, default_registry
from appforge.models import Configuration, GenerationResult
from appforge.notifications import NotificationBus, QueueObserver
from appforge.store import MemoryTaskStore


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def fast_config(tmp_path: Path) -> Config:
    """Config with zero pacing and zero backoff so runs finish instantly."""
    return Config(
        output_dir=tmp_path / "output",
        retry=RetryConfig(max_retries=3, base_delay=0.0, max_delay=0.0),
        recovery=RecoveryConfig(snapshot_limit=10, stage_timeout=5.0),
        pacing=PacingConfig(delay_scale=0.0),
    )


class SleepRecorder:
    """Stand-in for ``asyncio.sleep`` that records requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def recording_sleep() -> SleepRecorder:
    return SleepRecorder()


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------

@pytest.fixture
def store() -> MemoryTaskStore:
    return MemoryTaskStore()


@pytest.fixture
def observer() -> QueueObserver:
    return QueueObserver()


@pytest.fixture
def bus(observer: QueueObserver) -> NotificationBus:
    """Bus with the ``observer`` fixture already connected."""
    notification_bus = NotificationBus()
    notification_bus.connect(observer)
    return notification_bus


@pytest.fixture(scope="session")
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


@pytest.fixture(scope="session")
def registry(renderer: TemplateRenderer):
    return default_registry(renderer)


# ---------------------------------------------------------------------------
# Sample configurations
# ---------------------------------------------------------------------------

@pytest.fixture
def react_config() -> Configuration:
    return Configuration.from_values("web", "react", ["api"], name="Shop Front")


@pytest.fixture
def flutter_config() -> Configuration:
    return Configuration.from_values(
        "mobile", "flutter", ["database", "analytics"], name="Field Notes"
    )


ALL_FEATURES: list[str] = [
    "authentication",
    "database",
    "payments",
    "realtime",
    "analytics",
    "api",
    "typescript",
]

SAMPLE_PAIRS: list[tuple[str, str]] = [
    ("web", "react"),
    ("web", "nextjs"),
    ("web", "svelte"),
    ("mobile", "react-native"),
    ("mobile", "flutter"),
    ("desktop", "electron"),
    ("desktop", "tauri"),
]


def make_config(platform: str, framework: str, features: Any = None, **kwargs: Any) -> Configuration:
    """Validated configuration for tests that loop over many pairs."""
    return Configuration.from_values(platform, framework, features or [], **kwargs)


# ---------------------------------------------------------------------------
# Generated-source helpers
# ---------------------------------------------------------------------------

_IMPORT = re.compile(r"""(?:^|\n)\s*import\s+(?:[^'"\n]+?\s+from\s+)?['"]([^'"]+)['"]""")
_REQUIRE = re.compile(r"""require\(\s*['"]([^'"]+)['"]\s*\)""")
_NODE_BUILTINS = {"path", "fs", "url", "os", "child_process"}
_DART_IMPORT = re.compile(r"""^import\s+['"]package:([a-z0-9_]+)/""", re.MULTILINE)
_RUST_PATH = re.compile(r"\b([a-z][a-z0-9_]*)::")
_RUST_BUILTINS = {"std", "core", "alloc", "crate", "self", "super"}
_CARGO_SECTIONS = {"dependencies", "build-dependencies"}

NPM_PAIRS: list[tuple[str, str]] = [p for p in SAMPLE_PAIRS if p[1] != "flutter"]
NATIVE_PAIRS: list[tuple[str, str]] = [("mobile", "flutter"), ("desktop", "tauri")]


def _package_name(specifier: str) -> str | None:
    if specifier.startswith((".", "/", "@/")) or specifier.startswith("node:"):
        return None
    parts = specifier.split("/")
    name = "/".join(parts[:2]) if specifier.startswith("@") else parts[0]
    return None if name in _NODE_BUILTINS else name


def _npm_imports(content: str) -> set[str]:
    packages: set[str] = set()
    for pattern in (_IMPORT, _REQUIRE):
        for specifier in pattern.findall(content):
            name = _package_name(specifier)
            if name:
                packages.add(name)
    return packages


def imported_packages(result: GenerationResult) -> set[str]:
    """Packages referenced by the generated sources.

    npm packages from JS/TS imports, pub packages from Dart ``package:``
    imports (minus the app's own package) and crates from Rust paths.
    Crate names use underscores, as they do in Rust source.
    """
    own_package = result.manifest.get("name")
    packages: set[str] = set()
    for generated in result.files:
        path, content = generated.path, generated.content
        if path.endswith((".ts", ".tsx", ".js", ".svelte")):
            packages |= _npm_imports(content)
        elif path.endswith(".dart"):
            packages |= set(_DART_IMPORT.findall(content)) - {own_package}
        elif path.endswith(".rs"):
            packages |= set(_RUST_PATH.findall(content)) - _RUST_BUILTINS
    return packages


def cargo_dependencies(content: str) -> set[str]:
    """Crate names from the dependency tables of a ``Cargo.toml``."""
    crates: set[str] = set()
    section = None
    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("["):
            section = line.strip("[]")
        elif section in _CARGO_SECTIONS and "=" in line:
            crates.add(line.split("=", 1)[0].strip().replace("-", "_"))
    return crates


def runtime_dependencies(result: GenerationResult) -> set[str]:
    """Non-dev packages of a pubspec plus the crates of ``src-tauri/Cargo.toml``."""
    declared: set[str] = set()
    if result.get_file("pubspec.yaml") is not None:
        declared |= set(result.manifest.get("dependencies", {}))
    cargo = result.get_file("src-tauri/Cargo.toml")
    if cargo is not None:
        declared |= cargo_dependencies(cargo.content)
    return declared


def declared_packages(result: GenerationResult) -> set[str]:
    """Every package a manifest of *result* declares, dev tooling included."""
    return (
        set(result.manifest.get("dependencies", {}))
        | set(result.manifest.get("devDependencies", {}))
        | set(result.manifest.get("dev_dependencies", {}))
        | runtime_dependencies(result)
    )
