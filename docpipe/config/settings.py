"""Unified DocPipe configuration using Pydantic Settings v2.

Provides a typed, nested configuration model with environment variable
mapping. Prefer nested fields and `DOCPIPE_{SECTION}__{FIELD}` env vars.

Usage:
    from docpipe.config.settings import settings
    print(settings.sync.priority_window_ms)
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SyncConfig(BaseModel):
    """Multimodal configuration synchronization timings (milliseconds).

    The defaults are UI tuning constants: they keep a freshly applied assistant
    recommendation visible long enough and give re-renders time to settle.
    """

    priority_window_ms: float = Field(default=1000.0, ge=0, le=60_000)
    queue_spacing_ms: float = Field(default=50.0, ge=0, le=10_000)
    debounce_ms: float = Field(default=100.0, ge=0, le=10_000)


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=5000, ge=1, le=65535)
    max_sessions: int = Field(default=256, ge=1, le=100_000)


class AnalysisConfig(BaseModel):
    """Mock document analysis settings."""

    seed: int | None = Field(
        default=None, description="Seed the analyzer RNG for reproducible output"
    )
    confidence_min: float = Field(default=0.75, ge=0, le=1)
    confidence_max: float = Field(default=0.95, ge=0, le=1)

    @model_validator(mode="after")
    def _check_confidence_bounds(self) -> "AnalysisConfig":
        if self.confidence_min > self.confidence_max:
            raise ValueError("confidence_min cannot exceed confidence_max")
        return self


class DocPipeSettings(BaseSettings):
    """Unified DocPipe Studio configuration.

    - Environment variable mapping with DOCPIPE_ prefix
    - Nested configuration models for sync, server and analysis
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DOCPIPE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Core Application
    app_name: str = Field(default="DocPipe Studio")
    app_version: str = Field(default="0.1.0")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_file: Path | None = Field(default=None)

    # Nested Configuration Models
    sync: SyncConfig = Field(default_factory=SyncConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)

    def model_post_init(self, __context: Any) -> None:
        """Create the log directory and normalize the log level."""
        if self.log_file is not None:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
        self.log_level = self.log_level.upper()
        if self.debug and self.log_level == "INFO":
            self.log_level = "DEBUG"

    def get_sync_config(self) -> dict[str, float]:
        """Return sync timings as a flat mapping for session construction."""
        return {
            "priority_window_ms": self.sync.priority_window_ms,
            "queue_spacing_ms": self.sync.queue_spacing_ms,
            "debounce_ms": self.sync.debounce_ms,
        }


# Global settings instance - primary interface for the application
settings = DocPipeSettings()

__all__ = [
    "AnalysisConfig",
    "DocPipeSettings",
    "ServerConfig",
    "SyncConfig",
    "settings",
]
