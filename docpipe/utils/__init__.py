"""Shared utilities: logging setup, JSONL telemetry and clocks."""

from .monitoring import log_error_with_context, setup_logging
from .telemetry import current_session_id, log_jsonl, session_context
from .time import monotonic_ms

__all__ = [
    "current_session_id",
    "log_error_with_context",
    "log_jsonl",
    "monotonic_ms",
    "session_context",
    "setup_logging",
]
