"""Local JSONL telemetry for configuration sync decisions.

Events go to logs/telemetry.jsonl. Code running inside ``session_context``
tags every event with the owning config session, so denials and errors can be
grouped per document without threading the id through each call.

Environment:
    DOCPIPE_TELEMETRY_DISABLED: ``1``/``true``/``yes`` turns writing off.
    DOCPIPE_TELEMETRY_SAMPLE: Fraction of events kept, clamped to [0, 1].
    DOCPIPE_TELEMETRY_ROTATE_BYTES: Size at which the file moves to ``.1``.
"""

from __future__ import annotations

import contextlib
import json
import os
import random
from collections.abc import Iterator
from contextvars import ContextVar
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from loguru import logger

_TELEM_PATH = Path("./logs/telemetry.jsonl")

_SESSION_ID: ContextVar[str | None] = ContextVar("docpipe_session_id", default=None)


@contextlib.contextmanager
def session_context(session_id: str | None) -> Iterator[None]:
    """Attach ``session_id`` to telemetry events emitted inside the block."""
    token = _SESSION_ID.set(session_id)
    try:
        yield
    finally:
        _SESSION_ID.reset(token)


def current_session_id() -> str | None:
    """Return the session id bound by the innermost ``session_context``."""
    return _SESSION_ID.get()


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except (ValueError, TypeError):
        return default


def _enabled() -> bool:
    flag = os.getenv("DOCPIPE_TELEMETRY_DISABLED", "false").lower()
    if flag in {"1", "true", "yes"}:
        return False
    rate = max(0.0, min(1.0, _env_float("DOCPIPE_TELEMETRY_SAMPLE", 1.0)))
    return rate >= 1.0 or random.random() < rate  # noqa: S311


def _rotate_if_full(path: Path) -> None:
    limit = int(_env_float("DOCPIPE_TELEMETRY_ROTATE_BYTES", 0))
    if limit <= 0 or not path.exists() or path.stat().st_size < limit:
        return
    rotated = path.with_suffix(path.suffix + ".1")
    with contextlib.suppress(FileNotFoundError):
        rotated.unlink()
    path.rename(rotated)


def log_jsonl(event: dict[str, Any]) -> None:
    """Append ``event`` with an ISO timestamp and the current session id.

    An explicit ``session_id`` key in ``event`` wins over the context. Write
    failures are logged at debug level and never reach the caller.

    Args:
        event: Flat key-value telemetry dictionary.
    """
    if not _enabled():
        return

    rec: dict[str, Any] = {"ts": datetime.now(UTC).isoformat(), **event}
    session_id = current_session_id()
    if session_id is not None:
        rec.setdefault("session_id", session_id)

    try:
        _TELEM_PATH.parent.mkdir(parents=True, exist_ok=True)
        _rotate_if_full(_TELEM_PATH)
        with _TELEM_PATH.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False, default=str) + "\n")
    except OSError as exc:
        logger.debug("telemetry skipped (error_type={}, error={})", type(exc).__name__, exc)


__all__ = ["current_session_id", "log_jsonl", "session_context"]
