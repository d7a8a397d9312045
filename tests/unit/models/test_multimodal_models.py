"""Tests for multimodal configuration models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from docpipe.models.multimodal import (
    MultimodalConfig,
    PartialMultimodalConfig,
    UpdateEnvelope,
    UpdateSource,
)


@pytest.mark.unit
def test_config_defaults_all_off() -> None:
    assert MultimodalConfig().to_payload() == {
        "transcription": False,
        "ocr": False,
        "imageCaption": False,
        "visualAnalysis": False,
    }


@pytest.mark.unit
def test_config_accepts_camel_and_snake_names() -> None:
    camel = MultimodalConfig.model_validate({"imageCaption": True, "visualAnalysis": True})
    snake = MultimodalConfig(image_caption=True, visual_analysis=True)
    assert camel == snake
    assert camel.serialized() == snake.serialized()


@pytest.mark.unit
def test_config_is_frozen() -> None:
    config = MultimodalConfig()
    with pytest.raises(ValidationError):
        config.ocr = True  # type: ignore[misc]


@pytest.mark.unit
def test_config_rejects_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        MultimodalConfig.model_validate({"ocr": True, "sharpen": True})


@pytest.mark.unit
def test_partial_reports_only_explicit_changes() -> None:
    partial = PartialMultimodalConfig(ocr=False, visual_analysis=True)

    assert partial.changes() == {"ocr": False, "visual_analysis": True}
    assert partial.is_set("ocr") is True
    assert partial.is_set("transcription") is False
    assert partial.is_empty() is False
    assert PartialMultimodalConfig().is_empty() is True


@pytest.mark.unit
def test_partial_is_strict_about_booleans() -> None:
    with pytest.raises(ValidationError):
        PartialMultimodalConfig.model_validate({"ocr": "yes"})


@pytest.mark.unit
def test_partial_with_values_returns_copy() -> None:
    partial = PartialMultimodalConfig(ocr=False)
    updated = partial.with_values(transcription=True)

    assert partial.transcription is None
    assert updated.changes() == {"transcription": True, "ocr": False}


@pytest.mark.unit
def test_envelope_is_immutable() -> None:
    envelope = UpdateEnvelope(PartialMultimodalConfig(), UpdateSource.USER, 1.0)
    with pytest.raises(AttributeError):
        envelope.timestamp = 2.0  # type: ignore[misc]


@pytest.mark.unit
def test_update_source_values() -> None:
    assert UpdateSource("ai_assistant") is UpdateSource.AI_ASSISTANT
    assert {source.value for source in UpdateSource} == {"user", "ai_assistant", "system"}
