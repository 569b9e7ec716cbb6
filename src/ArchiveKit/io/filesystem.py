# === NAVMAP v1 ===
# {
#   "module": "ArchiveKit.io.filesystem",
#   "purpose": "Safe archive extraction loop producing a manifest of written files",
#   "sections": [
#     {"id": "manifest", "name": "Manifest Records", "anchor": "MAN", "kind": "dataclass"},
#     {"id": "entries", "name": "Per-Entry Extraction", "anchor": "ENT", "kind": "helpers"},
#     {"id": "archives", "name": "Archive Extraction", "anchor": "ARC", "kind": "api"},
#     {"id": "async", "name": "Async Wrapper", "anchor": "ASY", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Safe archive extraction producing a manifest of written files.

The loop runs in two passes over the archive:

Pass 1 (scan): reads entry headers only
  - Sums declared uncompressed sizes and rejects the archive when the total
    exceeds ``max_allowed_data_length``; nothing is created on disk yet

Pass 2 (extract): processes entries strictly in archive order
  - Checks the cancellation token, then the inclusion filter
  - Validates the entry's target directory against the destination root
  - Resolves the on-disk file name (keep, unescape, or hash)
  - Creates directories for directory markers, streams file payloads to disk
  - Records ``original path -> (relative output path, size)`` for files

Any failure aborts the call and propagates; files written by earlier entries
are left in place and no partial manifest is returned.
"""

from __future__ import annotations

import asyncio
import errno
import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Optional, Union

from ..cancellation import CancellationToken
from ..errors import UnsupportedEntryType
from .archive_reader import ArchiveEntry, EntryKind, copy_entry_to_file, open_archive, scan_entries
from .extraction_policy import ExtractionOptions
from .extraction_telemetry import ExtractionErrorCode, ExtractionMetrics, error_message
from .naming import check_file_name_length, coerce_naming_mode, resolve_file_name
from .paths import prepare_target_directory, split_entry_path, validate_file_name
from .size_guard import WrittenBytesBudget, check_declared_size

__all__ = [
    "ExtractedFileRecord",
    "Manifest",
    "extract_archive_to_folder",
    "extract_archive_to_folder_async",
    "manifest_to_json",
]

PathLike = Union[str, "os.PathLike[str]"]


@dataclass(frozen=True)
class ExtractedFileRecord:
    """A file written by the extraction loop.

    Attributes:
        output_path: Destination-relative path using ``/`` separators.
        size: Size of the file on disk, in bytes.
    """

    output_path: str
    size: int


Manifest = Dict[str, ExtractedFileRecord]


def manifest_to_json(manifest: Manifest, *, indent: Optional[int] = 2) -> str:
    """Serialise ``manifest`` as a JSON object keyed by archive path."""

    payload = {key: asdict(record) for key, record in manifest.items()}
    return json.dumps(payload, indent=indent, sort_keys=True)


def _reject_entry_type(entry: ArchiveEntry, log: logging.Logger) -> UnsupportedEntryType:
    log.error(
        "unsupported archive entry type",
        extra={"stage": "extract", "entry": entry.full_path, "kind": entry.kind.value},
    )
    return UnsupportedEntryType(
        error_message(ExtractionErrorCode.ENTRY_TYPE, f"{entry.full_path} ({entry.kind.value})"),
        code=ExtractionErrorCode.ENTRY_TYPE.value,
        entry=entry.full_path,
    )


def _extract_entry(
    entry: ArchiveEntry,
    raw_entry: Any,
    destination: Path,
    options: ExtractionOptions,
    budget: WrittenBytesBudget,
    log: logging.Logger,
) -> Optional[ExtractedFileRecord]:
    """Extract one accepted entry; return its record, or ``None`` for directories."""

    naming_mode = coerce_naming_mode(options.naming_mode_selector(entry.full_path), entry.full_path)

    relative_dir, base_name = split_entry_path(entry.full_path, logger=log)
    if entry.kind not in (EntryKind.FILE, EntryKind.DIRECTORY):
        raise _reject_entry_type(entry, log)
    if entry.is_directory and base_name:
        relative_dir = relative_dir / base_name
    target_dir = prepare_target_directory(entry.full_path, destination, relative_dir, logger=log)

    if entry.is_directory:
        log.debug(
            "created directory",
            extra={"stage": "extract", "entry": entry.full_path, "path": str(target_dir)},
        )
        return None

    file_name = resolve_file_name(
        base_name,
        naming_mode,
        max_length=options.max_file_name_length,
        hasher=options.name_hasher,
    )
    validate_file_name(entry.full_path, file_name, logger=log)

    target_path = target_dir / file_name
    check_file_name_length(target_path, entry.full_path, options.max_file_name_length)

    copy_entry_to_file(
        raw_entry,
        target_path,
        on_block=lambda count: budget.charge(count, entry.full_path),
    )
    record = ExtractedFileRecord(
        output_path=str(PurePosixPath(*relative_dir.parts, file_name)),
        size=target_path.stat().st_size,
    )
    log.debug(
        "extracted entry",
        extra={
            "stage": "extract",
            "entry": entry.full_path,
            "naming_mode": naming_mode.value,
            "output_path": record.output_path,
            "size": record.size,
        },
    )
    return record


def extract_archive_to_folder(
    archive_path: PathLike,
    destination: PathLike,
    options: Optional[ExtractionOptions] = None,
    cancellation_token: Optional[CancellationToken] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> Manifest:
    """Extract ``archive_path`` into ``destination`` and describe the written files.

    Args:
        archive_path: Archive file in any format libarchive can read.
        destination: Target directory; created (with parents) if missing.
        options: Extraction options; environment-aware defaults when ``None``.
        cancellation_token: Checked once before each entry is processed.
        logger: Logger for structured ``stage="extract"`` records.

    Returns:
        Mapping from each extracted file entry's original archive path to its
        :class:`ExtractedFileRecord`.  Directory markers and filtered-out
        entries are absent.

    Raises:
        SizeLimitExceeded: Declared (or, when enforced, written) bytes exceed
            ``options.max_allowed_data_length``.
        PathTraversalRejected: An entry's target leaves ``destination``.
        NameTooLong: A resolved file name is still longer than the maximum.
        UnsupportedEntryType: An accepted entry is a link or special file.
        OperationCancelled: ``cancellation_token`` was cancelled.
        ConfigError: The naming-mode selector returned an unknown mode.
        FileNotFoundError: ``archive_path`` does not exist.
        libarchive.ArchiveError: The archive is unreadable or corrupt.
    """

    if options is None:
        from ..settings import get_default_options

        options = get_default_options()
    log = logger or logging.getLogger("ArchiveKit.io")
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.is_file():
        raise FileNotFoundError(errno.ENOENT, "Archive not found", str(archive_path))

    metrics = ExtractionMetrics(archive=str(archive_path))

    # Pass 1: size guard on declared sizes, before any side effect
    entries = scan_entries(archive_path)
    metrics.entries_total = len(entries)
    metrics.bytes_declared = check_declared_size(
        entries,
        options.max_allowed_data_length,
        archive=archive_path,
        logger=log,
    )

    destination.mkdir(parents=True, exist_ok=True)
    budget = WrittenBytesBudget(
        options.max_allowed_data_length if options.enforce_written_limit else None
    )
    extracted: Manifest = {}

    # Pass 2: extract in archive order
    with open_archive(archive_path) as archive_entries:
        for entry, raw_entry in archive_entries:
            if cancellation_token is not None:
                cancellation_token.raise_if_cancelled(entry.full_path)

            if not options.accepts(entry.full_path):
                metrics.entries_filtered += 1
                continue

            record = _extract_entry(entry, raw_entry, destination, options, budget, log)
            if record is None:
                metrics.directories_created += 1
                continue
            extracted[entry.full_path] = record

    metrics.files_extracted = len(extracted)
    metrics.bytes_written = budget.written
    metrics.finalize()
    log.info("extracted archive", extra={**metrics.to_log_extra(), "options": options.summary()})
    return extracted


async def extract_archive_to_folder_async(
    archive_path: PathLike,
    destination: PathLike,
    options: Optional[ExtractionOptions] = None,
    cancellation_token: Optional[CancellationToken] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> Manifest:
    """Run :func:`extract_archive_to_folder` on a worker thread.

    Cancelling the awaiting task cancels the token, so the worker stops before
    its next entry; the task itself receives :class:`asyncio.CancelledError`.
    """

    token = cancellation_token or CancellationToken()
    try:
        return await asyncio.to_thread(
            extract_archive_to_folder,
            archive_path,
            destination,
            options,
            token,
            logger=logger,
        )
    except asyncio.CancelledError:
        token.cancel("awaiting task was cancelled")
        raise
