"""Pydantic v2 models for the appforge generation pipeline.

Defines the validated project configuration, the virtual file tree produced
by framework generators, and the project/task records tracked by the task
store while a generation run is in progress.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from appforge.utils import slugify


class ConfigurationError(ValueError):
    """An unknown platform, framework or feature.

    Configuration errors are fatal: they are never retried and are raised
    before any task is created.
    """


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Platform(str, Enum):
    """Target platform family."""
    WEB = "web"
    MOBILE = "mobile"
    DESKTOP = "desktop"


class FileKind(str, Enum):
    """Kind of entry in a generated file tree."""
    FILE = "file"
    DIRECTORY = "directory"


class TaskStatus(str, Enum):
    """Lifecycle of a single pipeline stage."""
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.ERROR)


class ProjectStatus(str, Enum):
    """Lifecycle of a project record."""
    DRAFT = "draft"
    GENERATING = "generating"
    COMPLETED = "completed"
    ERROR = "error"


FRAMEWORKS_BY_PLATFORM: dict[Platform, tuple[str, ...]] = {
    Platform.WEB: ("react", "nextjs", "svelte"),
    Platform.MOBILE: ("react-native", "flutter"),
    Platform.DESKTOP: ("electron", "tauri"),
}

KNOWN_FEATURES: tuple[str, ...] = (
    "authentication",
    "database",
    "payments",
    "realtime",
    "analytics",
    "api",
    "typescript",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class Configuration(BaseModel):
    """Immutable description of the project to generate.

    ``features`` is normalised to a sorted tuple without duplicates so that a
    configuration behaves as a set and generator output is deterministic.
    Field types are validated on construction; the platform/framework pairing
    and the feature names are checked by :meth:`check`, which the generator
    registry calls before selecting a generator.
    """

    model_config = ConfigDict(frozen=True)

    platform: Platform
    framework: str
    features: tuple[str, ...] = Field(default=())
    name: str = Field(default="My App")
    description: str = Field(default="")

    @field_validator("framework", mode="before")
    @classmethod
    def _normalise_framework(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("features", mode="before")
    @classmethod
    def _normalise_features(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            value = value.split(",")
        return tuple(sorted({str(f).strip().lower() for f in value if str(f).strip()}))

    @classmethod
    def from_values(
        cls,
        platform: str,
        framework: str,
        features: Optional[list[str]] = None,
        name: str = "My App",
        description: str = "",
    ) -> "Configuration":
        """Build and fully validate a configuration from raw values.

        Raises:
            ConfigurationError: On an unknown platform, framework or feature.
        """
        try:
            resolved = Platform(str(platform).strip().lower())
        except ValueError:
            raise ConfigurationError(f"Unknown platform: {platform}") from None
        config = cls(
            platform=resolved,
            framework=framework,
            features=features or (),
            name=name,
            description=description,
        )
        config.check()
        return config

    def check(self) -> None:
        """Raise ``ConfigurationError`` unless the configuration is buildable."""
        supported = FRAMEWORKS_BY_PLATFORM[self.platform]
        if self.framework not in supported:
            raise ConfigurationError(
                f"Unknown framework '{self.framework}' for platform "
                f"'{self.platform.value}' (expected one of: {', '.join(supported)})"
            )
        unknown = [f for f in self.features if f not in KNOWN_FEATURES]
        if unknown:
            raise ConfigurationError(f"Unknown feature(s): {', '.join(unknown)}")

    def has_feature(self, feature: str) -> bool:
        return feature in self.features

    @property
    def slug(self) -> str:
        """Package-safe project name, e.g. ``my-app``."""
        return slugify(self.name) or "app"


# ---------------------------------------------------------------------------
# Generated output
# ---------------------------------------------------------------------------

class GeneratedFile(BaseModel):
    """One entry of a virtual file tree."""
    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Relative POSIX path, unique within a result")
    content: str = Field(default="")
    kind: FileKind = Field(default=FileKind.FILE)


class GenerationResult(BaseModel):
    """Output of one generator invocation.

    The manifest file itself (``package.json`` or ``pubspec.yaml``) is part
    of ``files``; ``manifest`` holds the same data in structured form.
    """

    model_config = ConfigDict(frozen=True)

    files: list[GeneratedFile] = Field(default_factory=list)
    manifest: dict[str, Any] = Field(default_factory=dict)
    readme: str = Field(default="")
    deployment_descriptors: Optional[dict[str, Any]] = Field(default=None)

    @property
    def paths(self) -> list[str]:
        return [f.path for f in self.files]

    def get_file(self, path: str) -> Optional[GeneratedFile]:
        """Return the entry at *path*, or ``None``."""
        for generated in self.files:
            if generated.path == path:
                return generated
        return None


# ---------------------------------------------------------------------------
# Task store records
# ---------------------------------------------------------------------------

class Project(BaseModel):
    """A project submitted for generation."""
    id: str
    configuration: Configuration
    status: ProjectStatus = Field(default=ProjectStatus.DRAFT)
    estimated_cost: int = Field(default=0, description="One-time cost in cents")
    monthly_hosting_cost: int = Field(default=0, description="Monthly cost in cents")
    result: Optional[GenerationResult] = Field(default=None)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def name(self) -> str:
        return self.configuration.name

    @property
    def description(self) -> str:
        return self.configuration.description

    @property
    def platform(self) -> Platform:
        return self.configuration.platform

    @property
    def framework(self) -> str:
        return self.configuration.framework

    @property
    def features(self) -> tuple[str, ...]:
        return self.configuration.features


class Task(BaseModel):
    """Persisted record of one pipeline stage of a project."""
    id: str
    project_id: str
    stage_name: str
    status: TaskStatus = Field(default=TaskStatus.QUEUED)
    progress: int = Field(default=0, ge=0, le=100)
    message: str = Field(default="")
    logs: list[str] = Field(default_factory=list)
    metadata: Optional[dict[str, Any]] = Field(default=None)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class GenerationState(BaseModel):
    """Point-in-time snapshot used for rollback and partial recovery."""
    model_config = ConfigDict(frozen=True)

    project_id: str = Field(default="")
    step: str
    data: Any = Field(default=None)
    timestamp: float = Field(default_factory=time.time)
    files_generated: list[str] = Field(default_factory=list)
    logs: list[str] = Field(default_factory=list)
