"""Conversation-driven configuration merging.

Partial updates arrive from the UI (toggle clicks) and from the assistant
(conversation actions, analysis recommendations) in loosely structured
payloads. The merger normalizes them into a typed partial, applies the
assistant fill-in rule and submits the result to the session's update queue.
Malformed input never raises; anything unusable is treated as "no change".
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from loguru import logger

from docpipe.models.analysis import ProcessingRecommendation
from docpipe.models.multimodal import (
    FIELD_ALIASES,
    MultimodalConfig,
    PartialMultimodalConfig,
    UpdateEnvelope,
    UpdateOutcome,
    UpdateSource,
)
from docpipe.sync.queue import UpdateQueue
from docpipe.sync.scheduler import Scheduler
from docpipe.sync.store import ConfigValueStore

PartialInput = PartialMultimodalConfig | Mapping[str, Any] | None

# Fields the assistant turns on unless the partial says otherwise
_ASSISTANT_FILL_IN: tuple[str, ...] = ("ocr", "image_caption", "visual_analysis")


def _locate_multimodal(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Find the multimodal mapping inside a conversation payload."""
    if "configuration" in payload:
        configuration = payload.get("configuration")
        rag = configuration.get("rag") if isinstance(configuration, Mapping) else None
        multimodal = rag.get("multimodal") if isinstance(rag, Mapping) else None
        return multimodal if isinstance(multimodal, Mapping) else {}
    if "multimodal" in payload:
        multimodal = payload.get("multimodal")
        return multimodal if isinstance(multimodal, Mapping) else {}
    return payload


def normalize_partial(raw: PartialInput) -> PartialMultimodalConfig:
    """Coerce a loosely structured update into a typed partial.

    Accepts a ``PartialMultimodalConfig``, a flat mapping of the four fields
    (camelCase or snake_case keys), or a conversation payload nesting them
    under ``configuration.rag.multimodal`` or ``multimodal``.

    Args:
        raw: Incoming update; ``None`` means no change.

    Returns:
        PartialMultimodalConfig: Typed partial; empty when nothing usable.
    """
    if raw is None:
        return PartialMultimodalConfig()
    if isinstance(raw, PartialMultimodalConfig):
        return raw
    if not isinstance(raw, Mapping):
        logger.warning("Ignoring non-mapping config update of type {}", type(raw).__name__)
        return PartialMultimodalConfig()

    values: dict[str, bool] = {}
    for key, value in _locate_multimodal(raw).items():
        name = FIELD_ALIASES.get(key)
        if name is None:
            logger.warning("Ignoring unknown multimodal option {!r}", key)
            continue
        if value is None:
            continue
        if not isinstance(value, bool):
            logger.warning(
                "Ignoring non-boolean value for {}: {!r}", key, value
            )
            continue
        values[name] = value
    return PartialMultimodalConfig(**values)


def apply_assistant_defaults(partial: PartialMultimodalConfig) -> PartialMultimodalConfig:
    """Return the partial the assistant actually requests.

    Transcription is always forced on. OCR, image captioning and visual
    analysis are turned on only when the partial does not set them.
    """
    updates: dict[str, bool] = {"transcription": True}
    for name in _ASSISTANT_FILL_IN:
        if not partial.is_set(name):
            updates[name] = True
    return partial.with_values(**updates)


def _recommendation_type(item: ProcessingRecommendation | Mapping[str, Any]) -> str | None:
    if isinstance(item, ProcessingRecommendation):
        return item.processing_type
    if isinstance(item, Mapping):
        value = item.get("processingType", item.get("processing_type"))
        return value if isinstance(value, str) else None
    return None


class ConversationConfigMerger:
    """Turn UI and assistant updates into queued envelopes."""

    def __init__(
        self,
        store: ConfigValueStore,
        queue: UpdateQueue,
        scheduler: Scheduler,
        *,
        session_id: str | None = None,
    ) -> None:
        self._store = store
        self._queue = queue
        self._scheduler = scheduler
        self._session_id = session_id

    def submit(
        self, partial: PartialInput, source: UpdateSource = UpdateSource.USER
    ) -> UpdateOutcome:
        """Normalize ``partial`` and submit it on behalf of ``source``.

        Returns:
            UpdateOutcome: What the update queue did with the envelope.
        """
        normalized = normalize_partial(partial)
        if source is UpdateSource.AI_ASSISTANT:
            normalized = apply_assistant_defaults(normalized)
        envelope = UpdateEnvelope(
            partial=normalized,
            source=source,
            timestamp=self._scheduler.now_ms(),
        )
        logger.debug(
            "Reconciling {} update {} (session={})",
            source.value,
            normalized.changes(),
            self._session_id,
        )
        return self._queue.submit(envelope)

    def reconcile(
        self, partial: PartialInput, source: UpdateSource = UpdateSource.USER
    ) -> MultimodalConfig | None:
        """Submit an update and return the resulting configuration.

        Returns:
            MultimodalConfig | None: The snapshot when the update was applied
            during this call; None when it was denied or is still queued.
        """
        outcome = self.submit(partial, source)
        if outcome is UpdateOutcome.APPLIED:
            return self._store.current
        return None

    def toggle_option(
        self,
        option: str,
        enabled: bool,
        source: UpdateSource = UpdateSource.USER,
    ) -> MultimodalConfig | None:
        """Reconcile a single option given by its camelCase or snake_case name."""
        return self.reconcile({option: enabled}, source)

    def apply_recommendations(
        self,
        recommendations: Iterable[ProcessingRecommendation | Mapping[str, Any]] | None,
    ) -> UpdateOutcome | None:
        """Act on analysis recommendations as the assistant.

        A ``rag`` recommendation turns on the rich multimodal defaults. Other
        processing types do not affect the multimodal configuration.

        Returns:
            UpdateOutcome | None: Outcome of the assistant update, or None when
            no recommendation concerned RAG processing.
        """
        wants_rag = False
        for item in recommendations or ():
            kind = _recommendation_type(item)
            if kind == "rag":
                wants_rag = True
            else:
                logger.debug(
                    "Recommendation {!r} leaves multimodal config untouched (session={})",
                    kind,
                    self._session_id,
                )
        if not wants_rag:
            return None
        return self.submit(None, UpdateSource.AI_ASSISTANT)


__all__ = [
    "ConversationConfigMerger",
    "PartialInput",
    "apply_assistant_defaults",
    "normalize_partial",
]
