"""Configuration sessions.

A session is one open document/editing context. It owns a store, an arbiter,
an update queue, a debounced emitter and a merger, wired together:

    merger -> queue -> (arbiter check) -> store -> emitter -> subscribers

Nothing is shared between sessions.
"""

from __future__ import annotations

import asyncio
import uuid
from collections import OrderedDict
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from loguru import logger

from docpipe.config.settings import DocPipeSettings, settings
from docpipe.models.analysis import ProcessingRecommendation
from docpipe.models.multimodal import (
    MultimodalConfig,
    SourcePriorityState,
    UpdateEnvelope,
    UpdateOutcome,
    UpdateSource,
)
from docpipe.sync.arbiter import SourceArbiter
from docpipe.sync.emitter import DebouncedSyncEmitter
from docpipe.sync.merger import ConversationConfigMerger, PartialInput
from docpipe.sync.queue import UpdateQueue
from docpipe.sync.scheduler import AsyncioScheduler, Scheduler
from docpipe.sync.store import ConfigValueStore

ConfigListener = Callable[[MultimodalConfig], None]


class SessionNotFoundError(KeyError):
    """Raised when a session id is not registered."""


class ConfigSession:
    """Multimodal configuration state of one document."""

    def __init__(
        self,
        session_id: str | None = None,
        *,
        initial: MultimodalConfig | None = None,
        scheduler: Scheduler | None = None,
        priority_window_ms: float | None = None,
        queue_spacing_ms: float | None = None,
        debounce_ms: float | None = None,
        cfg: DocPipeSettings | None = None,
    ) -> None:
        """Create a session.

        Timing arguments left as None come from ``cfg.sync``.

        Args:
            session_id: Identifier; a random one is generated when omitted.
            initial: Starting configuration (all flags off by default).
            scheduler: Clock and timers; defaults to the running asyncio loop.
            priority_window_ms: Assistant priority window.
            queue_spacing_ms: Hold between two queued applications.
            debounce_ms: Quiet period before a settled config is emitted.
            cfg: Settings supplying default timings.

        Raises:
            RuntimeError: When no scheduler is given and no event loop runs.
        """
        cfg = cfg or settings
        if scheduler is None:
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                raise RuntimeError(
                    "ConfigSession needs an explicit scheduler outside a running event loop"
                ) from None
            scheduler = AsyncioScheduler()
        timings = cfg.get_sync_config()
        overrides = {
            "priority_window_ms": priority_window_ms,
            "queue_spacing_ms": queue_spacing_ms,
            "debounce_ms": debounce_ms,
        }
        timings.update({k: v for k, v in overrides.items() if v is not None})

        self.session_id = session_id or uuid.uuid4().hex
        self.scheduler: Scheduler = scheduler
        self._listeners: list[ConfigListener] = []
        self._closed = False

        self.store = ConfigValueStore(initial)
        self.arbiter = SourceArbiter(timings["priority_window_ms"])
        self.emitter = DebouncedSyncEmitter(
            self.scheduler,
            self._emit,
            quiet_ms=timings["debounce_ms"],
            session_id=self.session_id,
        )
        self.queue = UpdateQueue(
            self.store,
            self.arbiter,
            self.scheduler,
            spacing_ms=timings["queue_spacing_ms"],
            on_applied=self._on_applied,
            session_id=self.session_id,
        )
        self.merger = ConversationConfigMerger(
            self.store, self.queue, self.scheduler, session_id=self.session_id
        )
        logger.debug("Config session {} opened with {}", self.session_id, self.config.to_payload())

    @property
    def config(self) -> MultimodalConfig:
        """Current configuration snapshot."""
        return self.store.current

    @property
    def last_emitted(self) -> MultimodalConfig | None:
        """Last configuration delivered to subscribers."""
        return self.emitter.last_emitted

    @property
    def last_update(self) -> SourcePriorityState | None:
        return self.arbiter.state

    @property
    def pending_updates(self) -> int:
        return self.queue.pending_count

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: ConfigListener) -> Callable[[], None]:
        """Register a listener for settled configurations.

        Returns:
            Callable[[], None]: Function removing the listener.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def submit(
        self, partial: PartialInput, source: UpdateSource = UpdateSource.USER
    ) -> UpdateOutcome:
        """Submit a partial update; see ``ConversationConfigMerger.submit``."""
        if self._closed:
            logger.warning("Update ignored, session {} is closed", self.session_id)
            return UpdateOutcome.DENIED
        return self.merger.submit(partial, source)

    def reconcile(
        self, partial: PartialInput, source: UpdateSource = UpdateSource.USER
    ) -> MultimodalConfig | None:
        """Submit a partial update and return the config if it applied now."""
        if self.submit(partial, source) is UpdateOutcome.APPLIED:
            return self.config
        return None

    def toggle_option(
        self, option: str, enabled: bool, source: UpdateSource = UpdateSource.USER
    ) -> MultimodalConfig | None:
        return self.reconcile({option: enabled}, source)

    def apply_recommendations(
        self,
        recommendations: Iterable[ProcessingRecommendation | Mapping[str, Any]] | None,
    ) -> UpdateOutcome | None:
        if self._closed:
            logger.warning("Recommendations ignored, session {} is closed", self.session_id)
            return UpdateOutcome.DENIED
        return self.merger.apply_recommendations(recommendations)

    def close(self) -> None:
        """Cancel timers and drop pending updates."""
        if self._closed:
            return
        self._closed = True
        dropped = self.queue.close()
        self.emitter.close()
        self._listeners.clear()
        logger.debug("Config session {} closed (dropped={})", self.session_id, dropped)

    def _on_applied(self, config: MultimodalConfig, _envelope: UpdateEnvelope) -> None:
        self.emitter.notify(config)

    def _emit(self, config: MultimodalConfig) -> None:
        for listener in list(self._listeners):
            try:
                listener(config)
            except Exception:
                logger.exception("config listener failed (session={})", self.session_id)


class SessionRegistry:
    """Open configuration sessions keyed by id.

    When ``max_sessions`` is reached the least recently created session is
    closed to make room.
    """

    def __init__(
        self,
        *,
        cfg: DocPipeSettings | None = None,
        scheduler_factory: Callable[[], Scheduler] = AsyncioScheduler,
        max_sessions: int | None = None,
    ) -> None:
        self._cfg = cfg or settings
        self._scheduler_factory = scheduler_factory
        self._max_sessions = max_sessions or self._cfg.server.max_sessions
        self._sessions: OrderedDict[str, ConfigSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def create(self, initial: MultimodalConfig | None = None) -> ConfigSession:
        """Open a new session."""
        while len(self._sessions) >= self._max_sessions:
            oldest_id, oldest = self._sessions.popitem(last=False)
            logger.info("Session limit reached, closing oldest session {}", oldest_id)
            oldest.close()
        session = ConfigSession(
            initial=initial, scheduler=self._scheduler_factory(), cfg=self._cfg
        )
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> ConfigSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def close(self, session_id: str) -> None:
        """Close and forget a session."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)
        session.close()

    def close_all(self) -> int:
        """Close every session; return how many were open."""
        count = len(self._sessions)
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()
        return count


__all__ = [
    "ConfigListener",
    "ConfigSession",
    "SessionNotFoundError",
    "SessionRegistry",
]
