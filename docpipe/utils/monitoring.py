"""Logging setup and error reporting helpers."""

import sys
from typing import Any

from loguru import logger

from docpipe.utils.telemetry import log_jsonl


def setup_logging(log_level: str = "INFO", log_file: str | None = None) -> None:
    """Configure Loguru sinks.

    Args:
        log_level: Logging level (e.g., "DEBUG", "INFO", "WARNING", "ERROR").
        log_file: Optional log file path for file output.
    """
    # Remove default handler
    logger.remove()

    logger.add(
        sys.stderr,
        level=log_level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if log_file:
        logger.add(
            log_file,
            level=log_level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation="10 MB",
            retention="7 days",
            compression="gz",
        )

    logger.info("Logging configured: level={}, file={}", log_level, log_file)


def log_error_with_context(
    error: Exception,
    operation: str,
    context: dict[str, Any] | None = None,
    **kwargs: Any,
) -> None:
    """Log errors with context information.

    Args:
        error: The exception that was raised
        operation: Name of the operation that failed
        context: Optional context dictionary
        **kwargs: Additional context as keyword arguments
    """
    error_context: dict[str, Any] = {
        "operation": operation,
        "error_type": type(error).__name__,
        "error": str(error),
    }
    if context:
        error_context.update(context)
    if kwargs:
        error_context.update(kwargs)

    log_jsonl({"error_logged": True, **error_context})
    logger.error("Operation failed {}", error_context)


__all__ = ["log_error_with_context", "setup_logging"]
