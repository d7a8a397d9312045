"""Configuration interface for DocPipe Studio.

Usage:
    from docpipe.config import settings
    print(settings.sync.debounce_ms)
"""

from .settings import settings

__all__ = [
    "settings",
]
