"""Utility modules for filedrop."""

from filedrop.utils.logging import (
    configure_logging,
    get_logger,
    log_processing_result,
    set_object_key,
    set_request_context,
)
from filedrop.utils.result import (
    ConfigError,
    Err,
    EventError,
    ExitCode,
    Ok,
    Result,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "log_processing_result",
    "set_request_context",
    "set_object_key",
    # Result
    "Ok",
    "Err",
    "Result",
    "ConfigError",
    "EventError",
    "ExitCode",
]
