"""Structured JSON logging with per-invocation request context."""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

import structlog

# Context variables propagated into every log event
request_id_var: ContextVar[str] = ContextVar("request_id", default="")
object_key_var: ContextVar[str] = ContextVar("object_key", default="")


def set_request_context(request_id: str) -> None:
    """Set the request ID (e.g. the Lambda aws_request_id) for logging."""
    request_id_var.set(request_id)


def set_object_key(key: str) -> None:
    """Set the object key currently being processed."""
    object_key_var.set(key)


def add_context_info(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add request and object context to log events."""
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id

    object_key = object_key_var.get()
    if object_key:
        event_dict.setdefault("object_key", object_key)

    return event_dict


def add_timestamp(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add ISO format timestamp to log events."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def configure_logging(
    level: str = "info",
    format_type: str = "json",
    stream: Any = None,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Log level (debug, info, warn, error)
        format_type: Output format ('json' or 'text')
        stream: Output stream (default: sys.stderr)
    """
    if stream is None:
        stream = sys.stderr

    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warn": logging.WARNING,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }
    log_level = level_map.get(level.lower(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=log_level,
    )

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        add_timestamp,
        add_context_info,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if format_type == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(stream),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Optional logger name for context

    Returns:
        Lazy structlog logger that follows later configure_logging calls
    """
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()


def log_processing_result(
    original_key: str,
    action: str,
    success: bool,
    **fields: Any,
) -> None:
    """Log the terminal outcome of one notification record."""
    log = _outcome_logger.info if success else _outcome_logger.warning
    log(
        "processing_result",
        original_key=original_key,
        action=action,
        success=success,
        **fields,
    )


# Initialize with defaults on import
configure_logging()

_outcome_logger = get_logger("outcome")
