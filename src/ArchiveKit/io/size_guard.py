"""Decompression-bomb guards: declared-size ceiling and written-byte budget."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from ..errors import SizeLimitExceeded
from .archive_reader import ArchiveEntry
from .extraction_telemetry import ExtractionErrorCode, error_message

__all__ = ["check_declared_size", "WrittenBytesBudget"]


def check_declared_size(
    entries: Iterable[ArchiveEntry],
    limit_bytes: int,
    *,
    archive: Optional[Path] = None,
    logger: Optional[logging.Logger] = None,
) -> int:
    """Sum the declared sizes of ``entries`` and enforce ``limit_bytes``.

    Runs before anything is written; sizes come from archive headers and are
    not verified against the decompressed data.

    Returns:
        The declared total in bytes.

    Raises:
        SizeLimitExceeded: If the total is greater than ``limit_bytes``.
    """

    declared = sum(entry.length for entry in entries)
    if declared <= limit_bytes:
        return declared

    log = logger or logging.getLogger("ArchiveKit.io")
    log.error(
        "archive declared size exceeds limit",
        extra={
            "stage": "extract",
            "archive": str(archive) if archive is not None else None,
            "bytes_declared": declared,
            "limit_bytes": limit_bytes,
        },
    )
    raise SizeLimitExceeded(
        error_message(ExtractionErrorCode.ARCHIVE_TOO_LARGE, f"{declared} bytes, limit {limit_bytes}"),
        size=declared,
        limit=limit_bytes,
        code=ExtractionErrorCode.ARCHIVE_TOO_LARGE.value,
    )


class WrittenBytesBudget:
    """Running count of decompressed bytes written during one extraction call.

    Catches archives whose headers under-declare their sizes.  A budget built
    with ``limit_bytes=None`` only counts.
    """

    def __init__(self, limit_bytes: Optional[int]) -> None:
        self.limit_bytes = limit_bytes
        self.written = 0

    def charge(self, count: int, entry: str) -> None:
        """Add ``count`` bytes written for ``entry``; raise once over the limit."""
        self.written += count
        if self.limit_bytes is None or self.written <= self.limit_bytes:
            return
        raise SizeLimitExceeded(
            error_message(
                ExtractionErrorCode.WRITTEN_TOO_LARGE,
                f"{self.written} bytes written by entry {entry!r}, limit {self.limit_bytes}",
            ),
            size=self.written,
            limit=self.limit_bytes,
            code=ExtractionErrorCode.WRITTEN_TOO_LARGE.value,
            entry=entry,
        )
