# === NAVMAP v1 ===
# {
#   "module": "ArchiveKit.io.archive_reader",
#   "purpose": "Thin libarchive adapter exposing entries and streaming entry payloads to disk",
#   "sections": [
#     {"id": "entries", "name": "Archive Entries", "anchor": "ENT", "kind": "dataclass"},
#     {"id": "reading", "name": "Archive Reading", "anchor": "REA", "kind": "api"},
#     {"id": "copy", "name": "Entry Payload Copy", "anchor": "CPY", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Thin libarchive adapter used by the extraction loop.

libarchive detects the container format and compression filters on its own,
so ZIP, TAR, and compressed TAR archives share one code path.  Archives are
read as a forward-only stream: :func:`scan_entries` performs a header-only pass
for the size guard and :func:`open_archive` performs the extraction pass.
"""

from __future__ import annotations

import os
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Tuple

import libarchive

__all__ = [
    "EntryKind",
    "ArchiveEntry",
    "scan_entries",
    "open_archive",
    "copy_entry_to_file",
]

_COPY_BLOCK_SIZE = 1 << 16


class EntryKind(str, Enum):
    """Type of an archive entry as far as extraction is concerned."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    HARDLINK = "hardlink"
    SPECIAL = "special"


@dataclass(frozen=True)
class ArchiveEntry:
    """Read-only view of one archive entry header."""

    full_path: str
    length: int
    kind: EntryKind = EntryKind.FILE

    @property
    def is_directory(self) -> bool:
        """Directory markers contribute no output file."""
        return self.kind is EntryKind.DIRECTORY

    @classmethod
    def from_libarchive(cls, entry: Any) -> "ArchiveEntry":
        """Build an :class:`ArchiveEntry` from a ``libarchive.ArchiveEntry``."""

        pathname = entry.pathname or ""
        size = entry.size or 0
        if entry.isdir or pathname.endswith("/"):
            kind = EntryKind.DIRECTORY
        elif entry.issym:
            kind = EntryKind.SYMLINK
        elif entry.islnk:
            kind = EntryKind.HARDLINK
        elif entry.isfifo or entry.isblk or entry.ischr or entry.issock:
            kind = EntryKind.SPECIAL
        else:
            kind = EntryKind.FILE
        return cls(full_path=pathname, length=max(int(size), 0), kind=kind)


def scan_entries(archive_path: Path) -> List[ArchiveEntry]:
    """Return every entry header of ``archive_path`` in archive order."""

    with libarchive.file_reader(str(archive_path)) as archive:
        return [ArchiveEntry.from_libarchive(entry) for entry in archive]


@contextmanager
def open_archive(archive_path: Path) -> Iterator[Iterator[Tuple[ArchiveEntry, Any]]]:
    """Open ``archive_path`` and yield an iterator of ``(entry, raw_entry)`` pairs.

    ``raw_entry`` is only valid until the iterator advances; pass it to
    :func:`copy_entry_to_file` before moving on.  The archive is closed when the
    ``with`` block exits, including on errors.
    """

    with libarchive.file_reader(str(archive_path)) as archive:
        yield ((ArchiveEntry.from_libarchive(raw), raw) for raw in archive)


def copy_entry_to_file(
    raw_entry: Any,
    target_path: Path,
    *,
    on_block: Optional[Callable[[int], None]] = None,
) -> int:
    """Stream ``raw_entry``'s payload to ``target_path``, replacing any existing file.

    Bytes go to a temporary file next to the target which is renamed over it
    once complete, so a failed copy never leaves a truncated file at
    ``target_path``.  ``on_block`` is called with the size of every block
    before it is written and may raise to abort the copy.

    Returns:
        Number of bytes written.
    """

    temp_path = target_path.with_name(f".tmp-{os.getpid()}-{uuid.uuid4().hex[:12]}")
    bytes_written = 0
    try:
        with temp_path.open("wb") as temp_file:
            for block in raw_entry.get_blocks(_COPY_BLOCK_SIZE):
                if on_block is not None:
                    on_block(len(block))
                temp_file.write(block)
                bytes_written += len(block)
        temp_path.replace(target_path)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise
    return bytes_written
