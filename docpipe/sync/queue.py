"""Serialized application of configuration updates.

Envelopes are applied strictly in submission order by a single consumer.
After every application the consumer holds for ``spacing_ms`` before taking the
next envelope, giving observers such as a UI re-render time to settle. With a
spacing of zero the queue drains synchronously inside ``submit``.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable

from loguru import logger

from docpipe.models.multimodal import MultimodalConfig, UpdateEnvelope, UpdateOutcome
from docpipe.sync.arbiter import SourceArbiter
from docpipe.sync.scheduler import ScheduledTask, Scheduler
from docpipe.sync.store import ConfigValueStore
from docpipe.utils.telemetry import log_jsonl, session_context

AppliedListener = Callable[[MultimodalConfig, UpdateEnvelope], None]


class UpdateQueue:
    """FIFO of pending envelopes with a single serialized consumer."""

    def __init__(
        self,
        store: ConfigValueStore,
        arbiter: SourceArbiter,
        scheduler: Scheduler,
        *,
        spacing_ms: float = 50.0,
        on_applied: AppliedListener | None = None,
        session_id: str | None = None,
    ) -> None:
        """Initialize the queue.

        Args:
            store: Configuration snapshot mutated by this queue only.
            arbiter: Source priority rule consulted for every envelope.
            scheduler: Clock and delayed-task source for the inter-item hold.
            spacing_ms: Hold after each application; 0 disables it.
            on_applied: Called with the new snapshot after each application.
            session_id: Owning session, used for logs and telemetry.
        """
        if spacing_ms < 0:
            raise ValueError("spacing_ms must be >= 0")
        self._store = store
        self._arbiter = arbiter
        self._scheduler = scheduler
        self._spacing_ms = float(spacing_ms)
        self._on_applied = on_applied
        self._session_id = session_id
        self._pending: deque[UpdateEnvelope] = deque()
        self._busy = False
        self._hold: ScheduledTask | None = None
        self.applied_count = 0
        self.denied_count = 0

    @property
    def pending_count(self) -> int:
        """Envelopes waiting behind the consumer."""
        return len(self._pending)

    @property
    def busy(self) -> bool:
        """True while the consumer is applying or holding between entries."""
        return self._busy

    def submit(self, envelope: UpdateEnvelope) -> UpdateOutcome:
        """Enqueue ``envelope`` and run the consumer if it is idle.

        Returns:
            UpdateOutcome: ``APPLIED`` or ``DENIED`` when the envelope was
            processed during this call, ``QUEUED`` when it waits behind the
            consumer.
        """
        self._pending.append(envelope)
        if self._busy:
            logger.debug(
                "Queued {} update (session={}, pending={})",
                envelope.source.value,
                self._session_id,
                len(self._pending),
            )
            return UpdateOutcome.QUEUED
        outcome = self._drain()
        return outcome if outcome is not None else UpdateOutcome.QUEUED

    def close(self) -> int:
        """Stop the consumer and drop pending envelopes.

        Returns:
            int: Number of envelopes dropped.
        """
        if self._hold is not None:
            self._hold.cancel()
            self._hold = None
        dropped = len(self._pending)
        self._pending.clear()
        self._busy = False
        return dropped

    def _drain(self) -> UpdateOutcome | None:
        self._busy = True
        first: UpdateOutcome | None = None
        try:
            with session_context(self._session_id):
                while self._pending:
                    envelope = self._pending.popleft()
                    outcome = self._process(envelope)
                    if first is None:
                        first = outcome
                    if outcome is UpdateOutcome.APPLIED and self._start_hold():
                        return first
            return first
        finally:
            # Busy only while a hold is pending
            if self._hold is None:
                self._busy = False

    def _start_hold(self) -> bool:
        if self._spacing_ms <= 0:
            return False
        try:
            self._hold = self._scheduler.call_later(self._spacing_ms, self._resume)
        except RuntimeError as exc:
            logger.warning(
                "Queue spacing unavailable, applying without hold (session={}): {}",
                self._session_id,
                exc,
            )
            return False
        return True

    def _resume(self) -> None:
        self._hold = None
        self._drain()

    def _process(self, envelope: UpdateEnvelope) -> UpdateOutcome:
        if not self._arbiter.can_apply(envelope.source, envelope.timestamp):
            self.denied_count += 1
            logger.debug(
                "Dropped {} update {} (session={})",
                envelope.source.value,
                envelope.partial.changes(),
                self._session_id,
            )
            log_jsonl(
                {
                    "config_update_denied": True,
                    "source": envelope.source.value,
                    "fields": sorted(envelope.partial.changes()),
                }
            )
            return UpdateOutcome.DENIED

        config = self._store.apply(envelope.partial)
        self._arbiter.record(envelope.source, envelope.timestamp)
        self.applied_count += 1
        logger.debug(
            "Applied {} update {} -> {} (session={})",
            envelope.source.value,
            envelope.partial.changes(),
            config.to_payload(),
            self._session_id,
        )
        if self._on_applied is not None:
            try:
                self._on_applied(config, envelope)
            except Exception:
                logger.exception("applied listener failed (session={})", self._session_id)
        return UpdateOutcome.APPLIED


__all__ = ["AppliedListener", "UpdateQueue"]
