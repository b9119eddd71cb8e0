"""Structured logging for the scheduling client.

Events are emitted through structlog on top of the standard library, so
applications embedding the client can route them with ordinary logging
handlers. The CLI writes them to stderr, keeping stdout for its output.
"""
import logging
import sys

import structlog

LOG_FORMATS = ("json", "console")


def setup_structured_logging(log_level: str = "INFO", log_format: str = "json"):
    """
    Configure structlog and the root stdlib logger.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        log_format: "json" (one object per line) or "console" (human readable)
    """
    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        # Vietnamese notes and messages stay readable
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper()),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Logger for a module of this package (pass __name__)."""
    return structlog.get_logger(name)
