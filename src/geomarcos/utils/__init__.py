"""Shared utilities (structured logging)."""

from .logging import (
    JsonLogFormatter,
    OperationLog,
    configure_json_logger,
    flush_handlers,
    generate_trace_id,
    log_event,
    logged_operation,
)

__all__ = [
    "JsonLogFormatter",
    "OperationLog",
    "configure_json_logger",
    "flush_handlers",
    "generate_trace_id",
    "log_event",
    "logged_operation",
]
