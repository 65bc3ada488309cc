from __future__ import annotations

import json
import logging
from pathlib import Path

from indexed_view.runtime.logging import (
    JsonFormatter,
    LoggingConfig,
    configure_logging,
    setup_logging,
    shutdown_logging,
)


def test_setup_logging_adds_handler_when_missing() -> None:
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    try:
        root.handlers.clear()
        root.setLevel(logging.NOTSET)
        setup_logging("DEBUG")
        assert root.handlers
        assert root.level == logging.DEBUG
    finally:
        root.handlers.clear()
        root.handlers.extend(original_handlers)
        root.setLevel(original_level)


def test_setup_logging_does_not_override_existing_handlers() -> None:
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    sentinel = logging.NullHandler()
    try:
        root.handlers.clear()
        root.addHandler(sentinel)
        root.setLevel(logging.WARNING)
        setup_logging("DEBUG")
        assert root.handlers == [sentinel]
        assert root.level == logging.WARNING
    finally:
        root.handlers.clear()
        root.handlers.extend(original_handlers)
        root.setLevel(original_level)


def test_json_formatter_keeps_extra_fields() -> None:
    record = logging.LogRecord("indexed_view.test", logging.INFO, __file__, 1, "frame %s", (3,), None)
    record.zoom = 2

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "indexed_view.test"
    assert payload["msg"] == "frame 3"
    assert payload["fields"] == {"zoom": 2}


def test_configure_logging_streams_to_file_through_queue(tmp_path: Path) -> None:
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    log_file = tmp_path / "logs" / "viewer.jsonl"
    try:
        configure_logging(LoggingConfig(level_name="INFO", file_path=str(log_file), file_format="json"))
        logging.getLogger("indexed_view.test").info("presenter_resized size=%sx%s", 800, 480)
        shutdown_logging()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert json.loads(lines[-1])["msg"] == "presenter_resized size=800x480"
    finally:
        shutdown_logging()
        root.handlers.clear()
        root.handlers.extend(original_handlers)
        root.setLevel(original_level)


def test_json_timestamp_comes_from_record_creation_time() -> None:
    record = logging.LogRecord("indexed_view.test", logging.INFO, __file__, 1, "tick", (), None)
    record.created = 0.0

    payload = json.loads(JsonFormatter().format(record))

    assert payload["ts"] == "1970-01-01T00:00:00+00:00"
    assert "fields" not in payload
