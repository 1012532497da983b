"""
Structured logging configuration for sandbox-fetcher.

Configures structlog on top of the standard library so that fetcher
output can be read by humans (text) or collected as JSON lines.
"""

import logging
import sys
from typing import Any, Optional, TextIO

import structlog


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "text",
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure structlog and the root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: "json" for JSON lines, anything else for console output
        stream: Output stream, stderr by default
    """
    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=getattr(logging, log_level.upper(), logging.INFO),
        force=True,
    )

    processors: list[Any] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if log_format == "json":
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        # ConsoleRenderer formats exceptions itself
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None, **context: Any) -> structlog.stdlib.BoundLogger:
    """
    Get a logger bound with optional context.

    Args:
        name: Logger name
        **context: Key/value pairs bound to every event

    Returns:
        Configured logger instance
    """
    return structlog.get_logger(name, **context)
