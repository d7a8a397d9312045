"""Multimodal configuration synchronization engine.

Reconciles concurrent updates from the user, the assistant and system
defaults with serialized application, a source priority window and a
debounced, de-duplicated change notification.
"""

from docpipe.sync.arbiter import SourceArbiter
from docpipe.sync.emitter import DebouncedSyncEmitter
from docpipe.sync.merger import (
    ConversationConfigMerger,
    apply_assistant_defaults,
    normalize_partial,
)
from docpipe.sync.queue import UpdateQueue
from docpipe.sync.scheduler import AsyncioScheduler, Scheduler, VirtualScheduler
from docpipe.sync.session import ConfigSession, SessionNotFoundError, SessionRegistry
from docpipe.sync.store import ConfigValueStore, apply_partial

__all__ = [
    "AsyncioScheduler",
    "ConfigSession",
    "ConfigValueStore",
    "ConversationConfigMerger",
    "DebouncedSyncEmitter",
    "Scheduler",
    "SessionNotFoundError",
    "SessionRegistry",
    "SourceArbiter",
    "UpdateQueue",
    "VirtualScheduler",
    "apply_assistant_defaults",
    "apply_partial",
    "normalize_partial",
]
