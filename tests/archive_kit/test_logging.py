"""Tests for the ArchiveKit logging helpers."""

from __future__ import annotations

import json
import logging
import os
import time

from ArchiveKit.logging_utils import LOGGER_NAME, JSONFormatter, _prune_logs, setup_logging


def _managed(logger: logging.Logger):
    return [handler for handler in logger.handlers if getattr(handler, "_archivekit_managed", False)]


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.makeLogRecord(
        {
            "name": "ArchiveKit.io",
            "levelname": "INFO",
            "msg": "extracted archive",
            "stage": "extract",
            "files_extracted": 2,
        }
    )

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "extracted archive"
    assert payload["stage"] == "extract"
    assert payload["files_extracted"] == 2
    assert payload["logger"] == "ArchiveKit.io"
    assert payload["timestamp"].endswith("Z")


def test_setup_logging_writes_json_lines(tmp_path) -> None:
    logger = setup_logging(level="DEBUG", log_dir=tmp_path)

    logging.getLogger("ArchiveKit.io").info("hello", extra={"stage": "extract", "entry": "a.txt"})
    for handler in logger.handlers:
        handler.flush()

    (log_file,) = tmp_path.glob("archivekit-*.jsonl")
    lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert lines[-1]["message"] == "hello"
    assert lines[-1]["entry"] == "a.txt"
    assert logger.propagate is False


def test_setup_logging_replaces_previous_handlers(tmp_path) -> None:
    setup_logging(level="INFO", log_dir=tmp_path)
    logger = setup_logging(level="WARNING")

    assert len(_managed(logger)) == 1
    assert logger.level == logging.WARNING
    assert logging.getLogger(LOGGER_NAME) is logger


def test_unknown_level_falls_back_to_info() -> None:
    assert setup_logging(level="chatty").level == logging.INFO


def test_prune_compresses_and_purges_old_logs(tmp_path) -> None:
    old_time = time.time() - 90 * 86400
    stale = tmp_path / "archivekit-20200101.jsonl"
    stale.write_text('{"message": "old"}\n', encoding="utf-8")
    os.utime(stale, (old_time, old_time))
    expired = tmp_path / "archivekit-20190101.jsonl.gz"
    expired.write_bytes(b"")
    os.utime(expired, (old_time, old_time))
    fresh = tmp_path / "archivekit-20990101.jsonl"
    fresh.write_text("{}\n", encoding="utf-8")
    foreign = tmp_path / "other-20200101.jsonl"
    foreign.write_text("{}\n", encoding="utf-8")
    os.utime(foreign, (old_time, old_time))

    actions = _prune_logs(tmp_path, retention_days=30)

    assert not stale.exists()
    assert not expired.exists()
    assert fresh.exists()
    assert foreign.exists()
    assert (tmp_path / "archivekit-20200101.jsonl.gz").is_file()
    assert any(action.startswith("Compressed") for action in actions)
    assert any(action.startswith("Deleted") for action in actions)
