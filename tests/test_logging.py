import json
import logging
from pathlib import Path

import pytest

from geomarcos.utils.logging import configure_json_logger, flush_handlers, log_event, logged_operation


def test_structured_logger_emits_jsonl(tmp_path: Path) -> None:
    log_file = tmp_path / "events.jsonl"
    logger = configure_json_logger(log_file)

    trace_id = log_event(logger, "markers.correct.start", commit=False)
    log_event(logger, "markers.correct.completed", trace_id=trace_id, CORRECT=1)
    flush_handlers(logger)

    lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines() if line.strip()]

    assert len(lines) == 2
    assert all(line["trace_id"] == trace_id for line in lines)
    assert {line["event"] for line in lines} == {"markers.correct.start", "markers.correct.completed"}
    assert lines[0]["commit"] is False
    assert lines[1]["CORRECT"] == 1
    assert lines[0]["logger"] == "geomarcos"


def test_library_loggers_share_the_handler(tmp_path: Path) -> None:
    log_file = tmp_path / "library.jsonl"
    logger = configure_json_logger(log_file, level=logging.DEBUG)
    logging.getLogger("geomarcos.extraction.pipeline").debug("skipped %s", "V01")
    flush_handlers(logger)

    (line,) = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert line["message"] == "skipped V01"
    assert line["level"] == "debug"


def test_without_path_logging_is_silent() -> None:
    logger = configure_json_logger(None)
    assert isinstance(logger.handlers[0], logging.NullHandler)


def _read(log_file: Path) -> list:
    return [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines() if line.strip()]


def test_logged_operation_brackets_events(tmp_path: Path) -> None:
    log_file = tmp_path / "op.jsonl"
    logger = configure_json_logger(log_file)

    with logged_operation(logger, "markers.validate", force=True) as operation:
        operation.event("progress", checked=3)
        operation.record(total=3, valid=2)

    start, progress, completed = _read(log_file)
    assert [start["event"], progress["event"], completed["event"]] == [
        "markers.validate.start",
        "markers.validate.progress",
        "markers.validate.completed",
    ]
    assert start["force"] is True
    assert progress["checked"] == 3
    assert completed["total"] == 3 and completed["valid"] == 2
    assert completed["elapsed_ms"] >= 0
    assert len({start["trace_id"], progress["trace_id"], completed["trace_id"]}) == 1


def test_logged_operation_reports_failure(tmp_path: Path) -> None:
    log_file = tmp_path / "fail.jsonl"
    logger = configure_json_logger(log_file)

    with pytest.raises(RuntimeError):
        with logged_operation(logger, "markers.correct"):
            raise RuntimeError("database locked")

    start, failed = _read(log_file)
    assert failed["event"] == "markers.correct.failed"
    assert failed["level"] == "error"
    assert failed["error_type"] == "RuntimeError"
    assert failed["error_message"] == "database locked"
    assert failed["trace_id"] == start["trace_id"]


def test_fields_cannot_replace_core_keys(tmp_path: Path) -> None:
    log_file = tmp_path / "core.jsonl"
    logger = configure_json_logger(log_file)
    log_event(logger, "extract.document", level=logging.WARNING, event_id=1, timestamp="yesterday")
    flush_handlers(logger)

    (line,) = _read(log_file)
    assert line["timestamp"] != "yesterday"
    assert line["level"] == "warning"
    assert line["event_id"] == 1
