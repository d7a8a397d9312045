"""Run the DocPipe Studio server: ``python -m docpipe.server``."""

from __future__ import annotations

import uvicorn

from docpipe.config import settings
from docpipe.server.app import create_app
from docpipe.utils.monitoring import setup_logging


def main() -> int:
    setup_logging(
        settings.log_level, str(settings.log_file) if settings.log_file else None
    )
    uvicorn.run(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
