"""Aggregated IO helpers for ArchiveKit extraction.

This subpackage bundles the libarchive reader adapter, the size guard, path
validation, file-name resolution, and the extraction loop that ties them
together.  Re-exporting the most common symbols keeps importing ergonomics
simple for callers and for the CLI.
"""

from .archive_reader import ArchiveEntry, EntryKind, copy_entry_to_file, open_archive, scan_entries
from .extraction_policy import (
    DEFAULT_MAX_ALLOWED_DATA_LENGTH,
    ExtractionOptions,
    default_options,
    glob_file_filter,
    glob_naming_mode_selector,
    hash_all_names,
    keep_original_names,
    strict_options,
)
from .extraction_telemetry import ExtractionErrorCode, ExtractionMetrics, error_message
from .filesystem import (
    ExtractedFileRecord,
    Manifest,
    extract_archive_to_folder,
    extract_archive_to_folder_async,
    manifest_to_json,
)
from .naming import (
    MAX_FILE_NAME_LENGTH,
    NamingMode,
    hash_file_name,
    platform_max_file_name_length,
    resolve_file_name,
)
from .paths import prepare_target_directory, split_entry_path, validate_target_directory
from .size_guard import WrittenBytesBudget, check_declared_size

__all__ = [
    "extract_archive_to_folder",
    "extract_archive_to_folder_async",
    "manifest_to_json",
    "ExtractedFileRecord",
    "Manifest",
    "ExtractionOptions",
    "DEFAULT_MAX_ALLOWED_DATA_LENGTH",
    "default_options",
    "strict_options",
    "glob_file_filter",
    "glob_naming_mode_selector",
    "hash_all_names",
    "keep_original_names",
    "NamingMode",
    "MAX_FILE_NAME_LENGTH",
    "hash_file_name",
    "platform_max_file_name_length",
    "resolve_file_name",
    "split_entry_path",
    "validate_target_directory",
    "prepare_target_directory",
    "check_declared_size",
    "WrittenBytesBudget",
    "ArchiveEntry",
    "EntryKind",
    "scan_entries",
    "open_archive",
    "copy_entry_to_file",
    "ExtractionErrorCode",
    "ExtractionMetrics",
    "error_message",
]
