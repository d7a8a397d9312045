"""Multimodal processing configuration models.

Models:
    MultimodalConfig: Immutable snapshot of the four multimodal feature flags
    PartialMultimodalConfig: Requested changes; ``None`` means "leave as is"
    UpdateSource: Closed set of configuration producers
    UpdateEnvelope: A partial update tagged with its source and submission time
    SourcePriorityState: Source and time of the last applied update
    UpdateOutcome: What the update queue did with a submitted envelope

JSON payloads use the camelCase field names (``imageCaption``,
``visualAnalysis``); Python code uses snake_case attributes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

MULTIMODAL_FIELDS: tuple[str, ...] = (
    "transcription",
    "ocr",
    "image_caption",
    "visual_analysis",
)

# camelCase and snake_case spellings accepted from loosely typed payloads
FIELD_ALIASES: dict[str, str] = {
    "transcription": "transcription",
    "ocr": "ocr",
    "imageCaption": "image_caption",
    "image_caption": "image_caption",
    "visualAnalysis": "visual_analysis",
    "visual_analysis": "visual_analysis",
}


class UpdateSource(str, Enum):
    """Logical origin of a configuration update."""

    USER = "user"
    AI_ASSISTANT = "ai_assistant"
    SYSTEM = "system"


class UpdateOutcome(str, Enum):
    """Result of submitting an envelope to the update queue."""

    APPLIED = "applied"
    DENIED = "denied"
    QUEUED = "queued"


class MultimodalConfig(BaseModel):
    """Multimodal feature flags for RAG processing of a document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    transcription: bool = Field(default=False, description="Audio transcription")
    ocr: bool = Field(default=False, description="Optical character recognition")
    image_caption: bool = Field(
        default=False, alias="imageCaption", description="Image captioning"
    )
    visual_analysis: bool = Field(
        default=False, alias="visualAnalysis", description="Visual content analysis"
    )

    def to_payload(self) -> dict[str, bool]:
        """Return the camelCase JSON form."""
        return self.model_dump(by_alias=True)

    def serialized(self) -> str:
        """Return a canonical JSON string used for change detection."""
        return self.model_dump_json(by_alias=True)


class PartialMultimodalConfig(BaseModel):
    """A configuration update naming only the fields it intends to change."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, extra="forbid", strict=True
    )

    transcription: bool | None = None
    ocr: bool | None = None
    image_caption: bool | None = Field(default=None, alias="imageCaption")
    visual_analysis: bool | None = Field(default=None, alias="visualAnalysis")

    def changes(self) -> dict[str, bool]:
        """Return the explicitly requested field values (snake_case keys)."""
        return {
            name: value
            for name in MULTIMODAL_FIELDS
            if (value := getattr(self, name)) is not None
        }

    def is_set(self, name: str) -> bool:
        """Return True when ``name`` carries an explicit value."""
        return getattr(self, name) is not None

    def is_empty(self) -> bool:
        """Return True when no field is requested."""
        return not self.changes()

    def with_values(self, **values: Any) -> PartialMultimodalConfig:
        """Return a copy with the given snake_case fields replaced."""
        return self.model_copy(update=values)


@dataclass(frozen=True, slots=True)
class UpdateEnvelope:
    """A partial update awaiting serialized application.

    Args:
        partial: Requested changes.
        source: Producer of the update.
        timestamp: Monotonic submission instant in milliseconds.
    """

    partial: PartialMultimodalConfig
    source: UpdateSource
    timestamp: float


@dataclass(frozen=True, slots=True)
class SourcePriorityState:
    """Source and timestamp of the last applied update.

    Args:
        source: Producer of the last applied update.
        timestamp: Submission instant of that update in milliseconds.
    """

    source: UpdateSource
    timestamp: float


__all__ = [
    "FIELD_ALIASES",
    "MULTIMODAL_FIELDS",
    "MultimodalConfig",
    "PartialMultimodalConfig",
    "SourcePriorityState",
    "UpdateEnvelope",
    "UpdateOutcome",
    "UpdateSource",
]
