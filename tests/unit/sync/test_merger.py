"""Tests for conversation-driven configuration merging."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from docpipe.models.analysis import ProcessingRecommendation
from docpipe.models.multimodal import (
    MultimodalConfig,
    PartialMultimodalConfig,
    UpdateOutcome,
    UpdateSource,
)
from docpipe.sync.merger import apply_assistant_defaults, normalize_partial
from docpipe.sync.scheduler import VirtualScheduler
from docpipe.sync.session import ConfigSession


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw",
    [
        {"imageCaption": True, "ocr": False},
        {"image_caption": True, "ocr": False},
        {"configuration": {"rag": {"multimodal": {"imageCaption": True, "ocr": False}}}},
        {"multimodal": {"image_caption": True, "ocr": False}},
    ],
)
def test_normalize_accepts_flat_and_nested_payloads(raw: dict) -> None:
    assert normalize_partial(raw) == PartialMultimodalConfig(image_caption=True, ocr=False)


@pytest.mark.unit
def test_normalize_ignores_unknown_keys_and_non_booleans() -> None:
    partial = normalize_partial(
        {"ocr": "yes", "transcription": True, "sharpen": True, "visualAnalysis": None}
    )
    assert partial == PartialMultimodalConfig(transcription=True)


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw",
    [None, {}, ["ocr"], {"configuration": "rag"}, {"configuration": {"rag": None}}],
)
def test_normalize_treats_unusable_input_as_no_change(raw: object) -> None:
    assert normalize_partial(raw).is_empty()  # type: ignore[arg-type]


@pytest.mark.unit
def test_normalize_passes_typed_partial_through() -> None:
    partial = PartialMultimodalConfig(ocr=True)
    assert normalize_partial(partial) is partial


@pytest.mark.unit
def test_assistant_defaults_respect_explicit_values() -> None:
    """Transcription is forced; the other three are filled only when unset."""
    filled = apply_assistant_defaults(
        PartialMultimodalConfig(transcription=False, ocr=False)
    )
    assert filled == PartialMultimodalConfig(
        transcription=True, ocr=False, image_caption=True, visual_analysis=True
    )


@pytest.mark.unit
def test_assistant_defaults_on_empty_partial_enable_everything() -> None:
    filled = apply_assistant_defaults(PartialMultimodalConfig())
    assert filled.changes() == {
        "transcription": True,
        "ocr": True,
        "image_caption": True,
        "visual_analysis": True,
    }


@pytest.mark.unit
def test_assistant_reconcile_keeps_explicit_ocr_off(
    make_session: Callable[..., ConfigSession],
) -> None:
    session = make_session()

    result = session.merger.reconcile({"ocr": False}, UpdateSource.AI_ASSISTANT)

    assert result == MultimodalConfig(
        transcription=True, ocr=False, image_caption=True, visual_analysis=True
    )


@pytest.mark.unit
def test_user_reconcile_applies_only_given_fields(
    make_session: Callable[..., ConfigSession],
) -> None:
    session = make_session(MultimodalConfig(transcription=True))

    result = session.merger.reconcile({"visualAnalysis": True})

    assert result == MultimodalConfig(transcription=True, visual_analysis=True)


@pytest.mark.unit
def test_reconcile_returns_none_while_queued(
    scheduler: VirtualScheduler, make_session: Callable[..., ConfigSession]
) -> None:
    session = make_session()
    session.merger.reconcile({"ocr": True})

    assert session.merger.reconcile({"transcription": True}) is None

    scheduler.advance(50)
    assert session.config.transcription is True


@pytest.mark.unit
def test_toggle_option_accepts_camel_case_names(
    make_session: Callable[..., ConfigSession],
) -> None:
    session = make_session()

    result = session.merger.toggle_option("imageCaption", True)

    assert result is not None
    assert result.image_caption is True
    assert result.ocr is False


@pytest.mark.unit
def test_toggle_unknown_option_is_noop(make_session: Callable[..., ConfigSession]) -> None:
    session = make_session(MultimodalConfig(ocr=True))

    result = session.merger.toggle_option("sharpen", True)

    assert result == MultimodalConfig(ocr=True)


@pytest.mark.unit
def test_rag_recommendation_enables_rich_defaults(
    make_session: Callable[..., ConfigSession],
) -> None:
    session = make_session()

    outcome = session.merger.apply_recommendations(
        [
            ProcessingRecommendation(processing_type="kg"),
            {"processingType": "rag", "priority": "high"},
        ]
    )

    assert outcome is UpdateOutcome.APPLIED
    assert session.config == MultimodalConfig(
        transcription=True, ocr=True, image_caption=True, visual_analysis=True
    )
    assert session.last_update is not None
    assert session.last_update.source is UpdateSource.AI_ASSISTANT


@pytest.mark.unit
@pytest.mark.parametrize(
    "recommendations",
    [None, [], [ProcessingRecommendation(processing_type="idp")], [{"processing_type": 3}]],
)
def test_non_rag_recommendations_leave_config_alone(
    make_session: Callable[..., ConfigSession], recommendations: list | None
) -> None:
    session = make_session()

    assert session.merger.apply_recommendations(recommendations) is None
    assert session.config == MultimodalConfig()
