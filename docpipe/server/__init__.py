"""HTTP server for DocPipe Studio."""

from docpipe.server.app import create_app

__all__ = ["create_app"]
