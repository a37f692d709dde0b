"""JSON Lines logging for CLI runs and the library loggers beneath them.

Every command opens an *operation* with :func:`logged_operation`: a
``<name>.start`` event, then ``<name>.completed`` (with the counters the
command recorded and the elapsed time) or ``<name>.failed``.  All events of one
operation share a ``trace_id``.  Library modules log through
``logging.getLogger(__name__)`` under the ``geomarcos`` namespace and end up in
the same file.
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping
from uuid import uuid4

__all__ = [
    "JsonLogFormatter",
    "OperationLog",
    "configure_json_logger",
    "flush_handlers",
    "generate_trace_id",
    "log_event",
    "logged_operation",
]

LOGGER_NAME = "geomarcos"

# Payload keys set by the formatter; caller fields never replace them.
_RESERVED = frozenset({"timestamp", "level", "logger", "event", "message", "trace_id"})


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    return repr(value)


def _utc_timestamp(created: float) -> str:
    stamp = datetime.fromtimestamp(created, tz=timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, event, message, fields."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        payload: Dict[str, Any] = {
            "timestamp": _utc_timestamp(record.created),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": getattr(record, "event", None) or message,
            "message": message,
        }
        trace_id = getattr(record, "trace_id", None)
        if trace_id:
            payload["trace_id"] = trace_id
        fields = getattr(record, "extra_fields", None)
        if isinstance(fields, Mapping):
            payload.update((key, value) for key, value in fields.items() if key not in _RESERVED)
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=_json_default)


def configure_json_logger(log_path: Path | None, level: int = logging.INFO) -> logging.Logger:
    """Point the ``geomarcos`` logger at ``log_path``, replacing earlier handlers.

    Without a path a :class:`logging.NullHandler` keeps the library silent.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    for previous in list(logger.handlers):
        logger.removeHandler(previous)
        previous.close()

    handler: logging.Handler
    if log_path is None:
        handler = logging.NullHandler()
    else:
        path = Path(log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setFormatter(JsonLogFormatter())
    handler.setLevel(level)
    logger.addHandler(handler)
    return logger


def flush_handlers(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        handler.flush()


def generate_trace_id() -> str:
    return uuid4().hex


def log_event(
    logger: logging.Logger,
    event: str,
    *,
    trace_id: str | None = None,
    level: int = logging.INFO,
    message: str | None = None,
    **fields: Any,
) -> str:
    """Emit ``event`` with ``fields`` and return the trace id used."""

    trace_id = trace_id or generate_trace_id()
    logger.log(level, message or event, extra={"trace_id": trace_id, "event": event, "extra_fields": fields})
    return trace_id


@dataclass
class OperationLog:
    """Handle yielded by :func:`logged_operation` to emit progress and results."""

    logger: logging.Logger
    operation: str
    trace_id: str
    results: Dict[str, Any] = field(default_factory=dict)

    def event(self, name: str, **fields: Any) -> None:
        log_event(self.logger, f"{self.operation}.{name}", trace_id=self.trace_id, **fields)

    def record(self, **results: Any) -> None:
        """Fields added to the ``.completed`` event."""

        self.results.update(results)


@contextmanager
def logged_operation(logger: logging.Logger, operation: str, **fields: Any) -> Iterator[OperationLog]:
    """Bracket a command with ``.start`` and ``.completed``/``.failed`` events."""

    trace_id = log_event(logger, f"{operation}.start", **fields)
    handle = OperationLog(logger, operation, trace_id)
    started = time.perf_counter()
    try:
        yield handle
    except Exception as exc:
        log_event(
            logger,
            f"{operation}.failed",
            trace_id=trace_id,
            level=logging.ERROR,
            error_type=type(exc).__name__,
            error_message=str(exc),
        )
        raise
    else:
        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
        log_event(logger, f"{operation}.completed", trace_id=trace_id, elapsed_ms=elapsed_ms, **handle.results)
    finally:
        flush_handlers(logger)
