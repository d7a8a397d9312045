"""Time utilities.

Keep small and dependency-free.
"""

from __future__ import annotations

import time


def monotonic_ms() -> float:
    """Return a monotonic instant in milliseconds."""
    return time.monotonic_ns() / 1_000_000
