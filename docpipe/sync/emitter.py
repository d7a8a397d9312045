"""Trailing-edge debounce with change de-duplication.

Every ``notify`` restarts the quiet window; only the last configuration of a
burst reaches the callback, and only if it differs from the last emitted one.
"""

from __future__ import annotations

from collections.abc import Callable

from loguru import logger

from docpipe.models.multimodal import MultimodalConfig
from docpipe.sync.scheduler import ScheduledTask, Scheduler

EmitCallback = Callable[[MultimodalConfig], None]


class DebouncedSyncEmitter:
    """Emit settled configurations to an external consumer."""

    def __init__(
        self,
        scheduler: Scheduler,
        callback: EmitCallback,
        *,
        quiet_ms: float = 100.0,
        session_id: str | None = None,
    ) -> None:
        if quiet_ms < 0:
            raise ValueError("quiet_ms must be >= 0")
        self._scheduler = scheduler
        self._callback = callback
        self._quiet_ms = float(quiet_ms)
        self._session_id = session_id
        self._timer: ScheduledTask | None = None
        self._candidate: MultimodalConfig | None = None
        self._last_serialized: str | None = None
        self._last_emitted: MultimodalConfig | None = None
        self.emitted_count = 0
        self.suppressed_count = 0

    @property
    def pending(self) -> bool:
        """True while an emission is scheduled."""
        return self._timer is not None

    @property
    def last_emitted(self) -> MultimodalConfig | None:
        return self._last_emitted

    def notify(self, config: MultimodalConfig) -> None:
        """Schedule ``config`` for emission, superseding any pending one."""
        if self._timer is not None:
            self._timer.cancel()
        self._candidate = config
        try:
            self._timer = self._scheduler.call_later(self._quiet_ms, self._fire)
        except RuntimeError as exc:
            logger.warning(
                "Debounce timer unavailable, emitting now (session={}): {}",
                self._session_id,
                exc,
            )
            self._timer = None
            self._fire()

    def close(self) -> None:
        """Cancel a pending emission."""
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._candidate = None

    def _fire(self) -> None:
        self._timer = None
        config = self._candidate
        self._candidate = None
        if config is None:
            return
        serialized = config.serialized()
        if serialized == self._last_serialized:
            self.suppressed_count += 1
            logger.debug("Config unchanged, emission suppressed (session={})", self._session_id)
            return
        self._last_serialized = serialized
        self._last_emitted = config
        self.emitted_count += 1
        try:
            self._callback(config)
        except Exception:
            logger.exception("config sync callback failed (session={})", self._session_id)


__all__ = ["DebouncedSyncEmitter", "EmitCallback"]
