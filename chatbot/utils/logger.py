"""Structured logging configuration using structlog.

JSON lines in production, colored console output in development. The
request-id middleware binds per-request fields through contextvars, so
every event logged while serving a chat request carries its request_id.

Usage:
    from chatbot.utils.logger import setup_logging

    setup_logging(log_level="INFO", log_format="json")

    import structlog
    logger = structlog.get_logger(__name__)
    logger.info("completion_succeeded", conversation_id=cid)
"""
from __future__ import annotations

import logging

import structlog

# Third-party loggers that would otherwise print one line per upstream call
_NOISY_LOGGERS = ("httpx", "httpcore", "werkzeug")

# Event keys that may carry user or model text; never written to logs
REDACTED_KEYS = frozenset({"prompt", "input", "reply", "message_text"})


def redact_chat_text(logger, method_name, event_dict):
    """structlog processor replacing chat text with its length."""
    for key in REDACTED_KEYS & event_dict.keys():
        value = event_dict[key]
        event_dict[key] = f"<redacted {len(value)} chars>" if isinstance(value, str) else "<redacted>"
    return event_dict


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Configure structlog and stdlib logging for the whole process.

    Args:
        log_level: Logging level — DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_format: Output format — 'json' for production, 'console' for dev.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        redact_chat_text,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
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
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
