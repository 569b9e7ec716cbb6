"""Structured logging helpers for ArchiveKit extraction runs."""

from __future__ import annotations

import gzip
import json
import logging
import shutil
import sys
import time
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

__all__ = ["JSONFormatter", "setup_logging", "LOGGER_NAME"]

LOGGER_NAME = "ArchiveKit"
_LOG_FILE_PREFIX = "archivekit-"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Formatter emitting one JSON object per record, including ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        """Render ``record`` as a JSON string."""

        now = datetime.now(timezone.utc)
        payload = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "stage": getattr(record, "stage", None),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and key not in payload:
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _gzip_log(path: Path) -> Path:
    """Replace ``path`` with a gzip copy named ``<name>.gz``."""

    target = path.with_name(path.name + ".gz")
    with path.open("rb") as source, gzip.open(target, "wb") as sink:
        shutil.copyfileobj(source, sink)
    path.unlink()
    return target


def _prune_logs(log_dir: Path, retention_days: int) -> List[str]:
    """Gzip ``archivekit-*.jsonl`` files past retention and delete expired ``.gz`` copies.

    Other files in ``log_dir`` are never touched.
    """

    cutoff = time.time() - retention_days * 86400
    actions: List[str] = []
    for path in sorted(log_dir.glob(f"{_LOG_FILE_PREFIX}*.jsonl*")):
        if path.stat().st_mtime >= cutoff:
            continue
        if path.name.endswith(".jsonl"):
            target = _gzip_log(path)
            actions.append(f"Compressed {path.name} -> {target.name}")
        elif path.name.endswith(".jsonl.gz"):
            path.unlink()
            actions.append(f"Deleted expired archive {path.name}")
    return actions


def setup_logging(
    *,
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    retention_days: int = 30,
    max_log_size_mb: int = 100,
    propagate: bool = False,
) -> logging.Logger:
    """Configure the ``ArchiveKit`` logger with a console handler and optional JSON file.

    Calling it again replaces the handlers installed by a previous call.  When
    ``log_dir`` is given, records are also appended as JSON lines to a daily
    rotating file there, and older files are compressed or deleted according
    to ``retention_days``.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_archivekit_managed", False):
            logger.removeHandler(handler)
            if isinstance(handler, logging.StreamHandler):
                stream = getattr(handler, "stream", None)
                if stream in (sys.stdout, sys.stderr):
                    continue
            handler.close()

    console_formatter = logging.Formatter("%(levelname)s: %(message)s")
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(console_formatter)
    stream_handler._archivekit_managed = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        _prune_logs(log_dir, retention_days)
        today = datetime.now(timezone.utc).strftime("%Y%m%d")
        file_handler = RotatingFileHandler(
            log_dir / f"{_LOG_FILE_PREFIX}{today}.jsonl",
            maxBytes=int(max_log_size_mb * 1024 * 1024),
            backupCount=5,
        )
        file_handler.setFormatter(JSONFormatter())
        file_handler._archivekit_managed = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    logger.propagate = propagate
    return logger
