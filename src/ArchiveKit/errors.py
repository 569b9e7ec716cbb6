"""Exception hierarchy shared across archive scanning and extraction.

Extraction of an untrusted archive can fail for a handful of well-defined
reasons: the archive declares too much data, an entry tries to escape the
destination directory, a resolved file name does not fit the filesystem, or
the caller cancelled the run.  Each reason gets its own subclass so callers can
react to the category while still reaching the offending entry and limits.
Failures raised by libarchive or the operating system are never wrapped.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "ArchiveKitError",
    "ConfigError",
    "ExtractionError",
    "SizeLimitExceeded",
    "PathTraversalRejected",
    "NameTooLong",
    "UnsupportedEntryType",
    "OperationCancelled",
]


class ArchiveKitError(RuntimeError):
    """Base exception for every failure raised by ArchiveKit itself."""


class ConfigError(ArchiveKitError):
    """Raised when extraction options, environment settings, or CLI inputs are invalid."""


class ExtractionError(ArchiveKitError):
    """Base class for failures that abort an extraction call."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        entry: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.entry = entry


class SizeLimitExceeded(ExtractionError):
    """Raised when declared or written bytes exceed ``max_allowed_data_length``."""

    def __init__(
        self,
        message: str,
        *,
        size: int,
        limit: int,
        code: Optional[str] = None,
        entry: Optional[str] = None,
    ) -> None:
        super().__init__(message, code=code, entry=entry)
        self.size = size
        self.limit = limit


class PathTraversalRejected(ExtractionError):
    """Raised when an entry would be written outside the destination root."""


class NameTooLong(ExtractionError):
    """Raised when a resolved file name still exceeds the maximum length."""

    def __init__(
        self,
        message: str,
        *,
        target_path: str,
        entry: str,
        max_length: int,
        code: Optional[str] = None,
    ) -> None:
        super().__init__(message, code=code, entry=entry)
        self.target_path = target_path
        self.max_length = max_length


class UnsupportedEntryType(ExtractionError):
    """Raised for symlink, hardlink, and device/FIFO/socket entries."""


class OperationCancelled(ExtractionError):
    """Raised when cooperative cancellation is observed between entries."""
