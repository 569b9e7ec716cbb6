"""Public API for ArchiveKit safe archive extraction.

ArchiveKit extracts untrusted archives into a destination directory while
rejecting path traversal ("zip-slip") entries and decompression bombs, and
normalises output file names by keeping, unescaping, or hashing them.  The
extraction call returns a manifest mapping each archive path to the file that
was written for it.
"""

from __future__ import annotations

from .cancellation import CancellationToken, CancellationTokenGroup
from .errors import (
    ArchiveKitError,
    ConfigError,
    ExtractionError,
    NameTooLong,
    OperationCancelled,
    PathTraversalRejected,
    SizeLimitExceeded,
    UnsupportedEntryType,
)
from .io import (
    ExtractedFileRecord,
    ExtractionOptions,
    Manifest,
    NamingMode,
    extract_archive_to_folder,
    extract_archive_to_folder_async,
    glob_file_filter,
    glob_naming_mode_selector,
    hash_file_name,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "extract_archive_to_folder",
    "extract_archive_to_folder_async",
    "ExtractionOptions",
    "ExtractedFileRecord",
    "Manifest",
    "NamingMode",
    "hash_file_name",
    "glob_file_filter",
    "glob_naming_mode_selector",
    "CancellationToken",
    "CancellationTokenGroup",
    "ArchiveKitError",
    "ConfigError",
    "ExtractionError",
    "SizeLimitExceeded",
    "PathTraversalRejected",
    "NameTooLong",
    "UnsupportedEntryType",
    "OperationCancelled",
]
