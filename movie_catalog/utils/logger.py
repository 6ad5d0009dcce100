"""Structured logging configuration using structlog.

Provides centralized logging setup with:
- JSON output for log collection, colored console output for local runs
- Session id binding via contextvars (`bind_session`)
- Timestamp and log level on every log line
- Exception formatting

Usage:
    from movie_catalog.utils.logger import bind_session, setup_logging

    setup_logging(log_level="INFO", log_format="console")
    bind_session()

    import structlog
    logger = structlog.get_logger(__name__)
    logger.info("category_fetched", category="popular", count=20)
"""
from __future__ import annotations

import logging
import uuid

import structlog

# Third-party loggers that log every request at INFO; the API client already does.
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Configure structlog for the whole client.

    Args:
        log_level: Logging level — DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_format: Output format — 'json' or 'console'.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def bind_session(session_id: str | None = None) -> str:
    """Bind a session id to every log line emitted in this context.

    A store lives for one app session; its fetches, searches and watchlist
    calls are correlated by this id. Generates a UUID when none is given.

    Returns:
        The bound session id.
    """
    session_id = session_id or str(uuid.uuid4())
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(session_id=session_id)
    return session_id
