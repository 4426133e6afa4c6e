"""Process-wide logging configuration for the adapter entry point."""

from __future__ import annotations

import logging

from .correlation import CorrelationIdFilter

DEFAULT_FORMAT = (
    "%(asctime)s [%(levelname)-8s] [%(correlation_id)s] %(name)s: %(message)s"
)

# Libraries that log every frame or command at INFO
_NOISY_LOGGERS = ("aio_pika", "aiormq", "uvicorn.access")


def configure_logging(
    level: int | str = logging.INFO,
    log_format: str | None = None,
    log_file: str | None = None,
) -> None:
    """Configure the root logger with correlation-id tagging.

    Args:
        level: Logging level (name or number).
        log_format: Optional format string; may use ``%(correlation_id)s``.
        log_file: Optional log file path, in addition to stderr.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    formatter = logging.Formatter(fmt=log_format or DEFAULT_FORMAT)
    correlation_filter = CorrelationIdFilter()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(correlation_filter)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    quiet = max(logging.WARNING, level) if isinstance(level, int) else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet)
