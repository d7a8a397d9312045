"""DocPipe Studio - ingestion pipeline configuration backend.

Keeps a per-document multimodal processing configuration in sync between a
human user, an automated assistant and system defaults, and serves a mocked
document analysis endpoint.
"""

__version__ = "0.1.0"

from .config import settings

__all__ = [
    "settings",
]
