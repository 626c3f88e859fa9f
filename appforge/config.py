"""appforge configuration.

Centralised, typed configuration for the generation pipeline. All settings
use Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class RetryConfig(BaseModel):
    """Exponential backoff settings for retried stage work.

    The delay before attempt *n* is
    ``min(base_delay * backoff_multiplier ** (n - 1), max_delay)``.
    """

    max_retries: int = Field(default=3, ge=1, description="Total attempts per unit of work")
    base_delay: float = Field(default=1.0, ge=0, description="Delay before the first attempt, in seconds")
    max_delay: float = Field(default=10.0, ge=0, description="Upper bound for any single delay, in seconds")
    backoff_multiplier: float = Field(default=2.0, ge=1)

    def delay_for(self, attempt: int) -> float:
        """Return the delay in seconds before the 1-based *attempt*."""
        return min(self.base_delay * self.backoff_multiplier ** (attempt - 1), self.max_delay)


class RecoveryConfig(BaseModel):
    """Snapshot and timeout settings for the error recovery manager."""

    snapshot_limit: int = Field(
        default=10, ge=1, description="Snapshots retained per task id (oldest evicted first)"
    )
    stage_timeout: float = Field(
        default=300.0, gt=0, description="Deadline for one stage's unit of work, in seconds"
    )


class PacingConfig(BaseModel):
    """Pacing of progress checkpoints.

    Checkpoint delays only exist to make progress reporting observable.
    ``delay_scale`` multiplies every checkpoint delay; ``0`` disables them.
    """

    delay_scale: float = Field(default=1.0, ge=0)


class QualityConfig(BaseModel):
    """Switches for the code quality enhancement pass."""

    enable_lint: bool = Field(default=True)
    enable_format: bool = Field(default=True)
    enable_testing: bool = Field(default=True)
    strict_feature: str = Field(
        default="typescript",
        description="Feature flag that turns on strict type-checker configuration",
    )


class Config(BaseModel):
    """Global appforge configuration.

    Instances are typically created once by the CLI entry point or by the
    embedding application and then passed to the ``Orchestrator``.
    """

    output_dir: Path = Field(default=Path("./output"))
    state_file: str = Field(default="appforge-state.json")
    retry: RetryConfig = Field(default_factory=RetryConfig)
    recovery: RecoveryConfig = Field(default_factory=RecoveryConfig)
    pacing: PacingConfig = Field(default_factory=PacingConfig)
    quality: QualityConfig = Field(default_factory=QualityConfig)

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def state_path(self) -> Path:
        """Path to the persisted task store JSON file."""
        return self.output_dir / self.state_file

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Defaults to ``<output_dir>/config.json``.

        Returns:
            The path where the file was written.
        """
        target = path or (self.output_dir / "config.json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            APPFORGE_OUTPUT_DIR, APPFORGE_MAX_RETRIES, APPFORGE_BASE_DELAY,
            APPFORGE_MAX_DELAY, APPFORGE_STAGE_TIMEOUT, APPFORGE_DELAY_SCALE.
        """
        retry_kwargs: dict[str, Any] = {}
        if os.environ.get("APPFORGE_MAX_RETRIES"):
            retry_kwargs["max_retries"] = int(os.environ["APPFORGE_MAX_RETRIES"])
        if os.environ.get("APPFORGE_BASE_DELAY"):
            retry_kwargs["base_delay"] = float(os.environ["APPFORGE_BASE_DELAY"])
        if os.environ.get("APPFORGE_MAX_DELAY"):
            retry_kwargs["max_delay"] = float(os.environ["APPFORGE_MAX_DELAY"])

        recovery_kwargs: dict[str, Any] = {}
        if os.environ.get("APPFORGE_STAGE_TIMEOUT"):
            recovery_kwargs["stage_timeout"] = float(os.environ["APPFORGE_STAGE_TIMEOUT"])

        pacing_kwargs: dict[str, Any] = {}
        if os.environ.get("APPFORGE_DELAY_SCALE"):
            pacing_kwargs["delay_scale"] = float(os.environ["APPFORGE_DELAY_SCALE"])

        return cls(
            output_dir=Path(os.environ.get("APPFORGE_OUTPUT_DIR", "./output")),
            retry=RetryConfig(**retry_kwargs),
            recovery=RecoveryConfig(**recovery_kwargs),
            pacing=PacingConfig(**pacing_kwargs),
        )
