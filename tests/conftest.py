"""Top-level pytest configuration for shared fixtures.

Keeps telemetry writes inside each test's temporary directory and provides
virtual-time sessions so timing rules can be asserted exactly.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from docpipe.models.multimodal import MultimodalConfig
from docpipe.sync.scheduler import VirtualScheduler
from docpipe.sync.session import ConfigSession


@pytest.fixture(autouse=True)
def _isolate_telemetry(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect telemetry to a per-test file and reset env overrides."""
    from docpipe.utils import telemetry as telem

    target = tmp_path / "telemetry.jsonl"
    monkeypatch.setattr(telem, "_TELEM_PATH", target, raising=False)
    monkeypatch.delenv("DOCPIPE_TELEMETRY_DISABLED", raising=False)
    monkeypatch.delenv("DOCPIPE_TELEMETRY_SAMPLE", raising=False)
    monkeypatch.delenv("DOCPIPE_TELEMETRY_ROTATE_BYTES", raising=False)
    return target


@pytest.fixture
def telemetry_path(_isolate_telemetry: Path) -> Path:
    """Path of the JSONL telemetry file for the current test."""
    return _isolate_telemetry


@pytest.fixture
def scheduler() -> VirtualScheduler:
    """Virtual clock starting away from zero so offsets are meaningful."""
    return VirtualScheduler(start_ms=10_000.0)


@pytest.fixture
def make_session(scheduler: VirtualScheduler) -> Iterator[Callable[..., ConfigSession]]:
    """Factory for sessions on the shared virtual scheduler.

    Defaults to the reference timings (1000/50/100 ms); override per test.
    """
    sessions: list[ConfigSession] = []

    def _make(
        initial: MultimodalConfig | None = None, **kwargs: Any
    ) -> ConfigSession:
        kwargs.setdefault("priority_window_ms", 1000.0)
        kwargs.setdefault("queue_spacing_ms", 50.0)
        kwargs.setdefault("debounce_ms", 100.0)
        session = ConfigSession(initial=initial, scheduler=scheduler, **kwargs)
        sessions.append(session)
        return session

    yield _make
    for session in sessions:
        session.close()
