# === NAVMAP v1 ===
# {
#   "module": "ArchiveKit.io.paths",
#   "purpose": "Split archive entry paths and keep extraction targets inside the destination root",
#   "sections": [
#     {"id": "split", "name": "Entry Path Splitting", "anchor": "SPL", "kind": "helpers"},
#     {"id": "containment", "name": "Containment Checks", "anchor": "CON", "kind": "validators"},
#     {"id": "prepare", "name": "Directory Preparation", "anchor": "PRE", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Path validation for archive extraction (zip-slip defence).

Entry paths are split on ``/`` (and ``\\``) into directory segments and a base
name.  Before any directory is created the candidate target directory is
canonicalised together with the destination root and must be a strict
descendant of it; relative segments, absolute paths, and symlinks already on
disk therefore cannot move output outside the destination.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path, PurePosixPath
from typing import Optional, Tuple

from ..errors import PathTraversalRejected
from .extraction_telemetry import ExtractionErrorCode, error_message

__all__ = [
    "ENTRY_SEPARATOR",
    "split_entry_path",
    "validate_file_name",
    "validate_target_directory",
    "prepare_target_directory",
]

ENTRY_SEPARATOR = "/"

_DRIVE_RE = re.compile(r"^[A-Za-z]:$")


def _reject(entry: str, reason: str, logger: Optional[logging.Logger]) -> PathTraversalRejected:
    log = logger or logging.getLogger("ArchiveKit.io")
    log.error(
        "archive entry escapes destination",
        extra={"stage": "extract", "entry": entry, "reason": reason},
    )
    return PathTraversalRejected(
        error_message(ExtractionErrorCode.TRAVERSAL, f"{entry} ({reason})"),
        code=ExtractionErrorCode.TRAVERSAL.value,
        entry=entry,
    )


def split_entry_path(
    entry: str,
    *,
    logger: Optional[logging.Logger] = None,
) -> Tuple[PurePosixPath, str]:
    """Split ``entry`` into its directory part and base name.

    Directory markers (paths ending in the separator) yield an empty base name.

    Raises:
        PathTraversalRejected: For absolute paths, drive roots, and ``..`` segments.

    Examples:
        >>> split_entry_path("Images/photo.png")
        (PurePosixPath('Images'), 'photo.png')
        >>> split_entry_path("content.xml")
        (PurePosixPath('.'), 'content.xml')
    """

    normalized = entry.replace("\\", ENTRY_SEPARATOR)
    if normalized.startswith(ENTRY_SEPARATOR):
        raise _reject(entry, "absolute path", logger)

    segments = normalized.split(ENTRY_SEPARATOR)
    base_name = segments.pop()
    parts = [segment for segment in segments if segment not in ("", ".")]

    if parts and _DRIVE_RE.match(parts[0]):
        raise _reject(entry, "drive-qualified path", logger)
    if ".." in parts or base_name == "..":
        raise _reject(entry, "relative parent segment", logger)
    if base_name == ".":
        base_name = ""

    return PurePosixPath(*parts), base_name


def validate_file_name(entry: str, file_name: str, *, logger: Optional[logging.Logger] = None) -> None:
    """Ensure a resolved ``file_name`` is a single, non-relative path component."""

    if not file_name or file_name in (".", "..") or "/" in file_name or "\\" in file_name:
        raise _reject(entry, f"resolved file name {file_name!r} is not a plain name", logger)


def validate_target_directory(
    entry: str,
    destination: Path,
    relative_dir: PurePosixPath,
    *,
    logger: Optional[logging.Logger] = None,
) -> Path:
    """Return the canonical target directory for ``relative_dir`` under ``destination``.

    The check compares path components, not string prefixes, so a destination of
    ``out`` never accepts ``out-evil``.

    Raises:
        PathTraversalRejected: If the canonical target is not strictly inside
            the canonical destination.
    """

    destination_root = destination.resolve()
    if not relative_dir.parts:
        return destination_root

    candidate = (destination / Path(*relative_dir.parts)).resolve()
    if candidate == destination_root or destination_root not in candidate.parents:
        raise _reject(entry, f"target directory {candidate} is not inside {destination_root}", logger)
    return candidate


def prepare_target_directory(
    entry: str,
    destination: Path,
    relative_dir: PurePosixPath,
    *,
    logger: Optional[logging.Logger] = None,
) -> Path:
    """Validate and create the directory an entry will be written into.

    Returns:
        The canonical directory, created if it did not exist.
    """

    target_dir = validate_target_directory(entry, destination, relative_dir, logger=logger)
    target_dir.mkdir(parents=True, exist_ok=True)
    return target_dir
