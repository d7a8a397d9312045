"""Source priority rule between configuration producers.

A freshly applied assistant recommendation must not be stomped by a stray UI
event in the same tick, while the assistant itself may always override. This
is a time window, not a lock: a denied update is dropped, never retried.
"""

from __future__ import annotations

from loguru import logger

from docpipe.models.multimodal import SourcePriorityState, UpdateSource


class SourceArbiter:
    """Decide whether an update from a given source may apply now."""

    def __init__(self, priority_window_ms: float = 1000.0) -> None:
        """Initialize the arbiter.

        Args:
            priority_window_ms: How long an applied assistant update shields the
                configuration from user and system updates.
        """
        if priority_window_ms < 0:
            raise ValueError("priority_window_ms must be >= 0")
        self._window_ms = float(priority_window_ms)
        self._state: SourcePriorityState | None = None

    @property
    def priority_window_ms(self) -> float:
        return self._window_ms

    @property
    def state(self) -> SourcePriorityState | None:
        """Last applied update, or None before the first application."""
        return self._state

    def can_apply(self, candidate: UpdateSource, now_ms: float) -> bool:
        """Return True when an update from ``candidate`` may apply at ``now_ms``.

        Args:
            candidate: Source of the incoming update.
            now_ms: Instant of the incoming update in milliseconds.

        Returns:
            bool: False only for a user or system update arriving inside the
            priority window of an applied assistant update.
        """
        last = self._state
        if last is None:
            return True
        if candidate is UpdateSource.AI_ASSISTANT:
            return True
        # USER and SYSTEM share the same rule
        elapsed = now_ms - last.timestamp
        if last.source is UpdateSource.AI_ASSISTANT and elapsed < self._window_ms:
            logger.debug(
                "Blocking {} update {:.0f}ms after assistant update (window={:.0f}ms)",
                candidate.value,
                elapsed,
                self._window_ms,
            )
            return False
        return True

    def record(self, source: UpdateSource, timestamp_ms: float) -> None:
        """Remember ``source`` and ``timestamp_ms`` as the last applied update.

        ``timestamp_ms`` is the envelope's submission time, not the moment the
        queue applied it, so the window opens when the producer acted.
        """
        self._state = SourcePriorityState(source=source, timestamp=timestamp_ms)


__all__ = ["SourceArbiter"]
