"""Tests for logging setup and the run-id context (observability/)."""

import json
import logging

from observability.logging import (
    LOG_FILE_NAME,
    ContextFilter,
    JsonFormatter,
    TextFormatter,
    clear_context,
    set_run_context,
    setup_logging,
)
from observability.tracing import trace_operation


def make_record(msg: str = "Analysis started", level: int = logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord("pipeline", level, "pipeline.py", 42, msg, (), None, func="run")
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_context_filter_stamps_run_id():
    set_run_context("abc123")
    try:
        record = make_record()
        assert ContextFilter().filter(record) is True
        assert record.run_id == "abc123"
    finally:
        clear_context()


def test_context_filter_default_run_id():
    clear_context()
    record = make_record()
    ContextFilter().filter(record)
    assert record.run_id == "-"


def test_json_formatter_fields():
    record = make_record(run_id="r1", chars=120)
    data = json.loads(JsonFormatter().format(record))

    assert data["level"] == "INFO"
    assert data["logger"] == "pipeline"
    assert data["message"] == "Analysis started"
    assert data["run_id"] == "r1"
    assert data["chars"] == 120
    assert "source" not in data


def test_json_formatter_warning_has_source_and_stringifies_extras():
    record = make_record("Page fetch failed", level=logging.WARNING, run_id="r2", target=object())
    data = json.loads(JsonFormatter().format(record))

    assert data["source"] == {"file": "pipeline.py", "line": 42, "function": "run"}
    assert data["target"].startswith("<object object")


def test_json_formatter_keeps_chinese_readable():
    record = make_record("正在分析内容...", run_id="r3")
    assert "正在分析内容" in JsonFormatter().format(record)


def test_text_formatter_includes_run_id():
    record = make_record(run_id="r4")
    line = TextFormatter().format(record)
    assert "[INFO] [r4] pipeline: Analysis started" in line


def test_setup_logging_creates_log_file(config, restore_root_logger):
    assert setup_logging(config) is True

    logging.getLogger("pipeline").info("hello from the test")
    for handler in restore_root_logger.handlers:
        handler.flush()

    log_file = config.log_dir / LOG_FILE_NAME
    assert log_file.exists()
    assert "hello from the test" in log_file.read_text(encoding="utf-8")
    assert len(restore_root_logger.handlers) == 2


def test_setup_logging_falls_back_to_console(config, restore_root_logger, tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way")
    config.log_dir = blocker / "log"

    assert setup_logging(config) is False
    assert len(restore_root_logger.handlers) == 1


def test_trace_operation_disabled_yields_plain_dict():
    with trace_operation("analysis_run", {"run_id": "x"}) as attrs:
        attrs["ai_score"] = 10
    assert attrs == {"ai_score": 10}


def test_setup_logging_json_file_carries_run_id(config, restore_root_logger):
    config.log_format = "json"
    setup_logging(config)

    set_run_context("run42")
    logging.getLogger("pipeline").info("Analysis started", extra={"chars": 12})
    for handler in restore_root_logger.handlers:
        handler.flush()

    lines = (config.log_dir / LOG_FILE_NAME).read_text(encoding="utf-8").splitlines()
    entry = json.loads(lines[-1])
    assert entry["run_id"] == "run42"
    assert entry["chars"] == 12
    assert entry["message"] == "Analysis started"
