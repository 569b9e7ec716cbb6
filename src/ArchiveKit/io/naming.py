# === NAVMAP v1 ===
# {
#   "module": "ArchiveKit.io.naming",
#   "purpose": "Derive on-disk file names for archive entries (keep, unescape, or hash)",
#   "sections": [
#     {"id": "modes", "name": "Naming Modes", "anchor": "MOD", "kind": "constants"},
#     {"id": "limits", "name": "Platform Name Limits", "anchor": "LIM", "kind": "helpers"},
#     {"id": "hashing", "name": "Name Hashing", "anchor": "HAS", "kind": "helpers"},
#     {"id": "resolver", "name": "Name Resolution", "anchor": "RES", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Derive on-disk file names for archive entries.

An entry's stored base name is either kept, percent-decoded, or replaced with a
deterministic hash depending on its :class:`NamingMode`.  Names longer than the
configured maximum are always hashed so that archives built on permissive
systems still extract on filesystems with short name limits.
"""

from __future__ import annotations

import hashlib
import logging
import sys
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Callable, Optional, Union
from urllib.parse import unquote

from ..errors import ConfigError, NameTooLong
from .extraction_telemetry import ExtractionErrorCode, error_message

__all__ = [
    "NamingMode",
    "MAX_FILE_NAME_LENGTH",
    "platform_max_file_name_length",
    "hash_file_name",
    "coerce_naming_mode",
    "resolve_file_name",
    "check_file_name_length",
]

_LOGGER = logging.getLogger("ArchiveKit.io")

_HASH_DIGITS = 16
_MAX_KEPT_SUFFIX = 16


class NamingMode(str, Enum):
    """How an entry's stored name becomes its on-disk name."""

    KEEP_ORIGINAL = "keep_original"
    UNESCAPE = "unescape"
    HASH = "hash"


def platform_max_file_name_length(platform: Optional[str] = None) -> int:
    """Return the longest file name, in characters, extraction will write.

    Windows gets 100 characters to leave room for the destination path under
    ``MAX_PATH``.  Elsewhere the 255 byte ``NAME_MAX`` is halved because
    non-ASCII characters take at least two bytes on disk.
    """

    platform = platform or sys.platform
    if platform.startswith("win"):
        return 100
    return 255 // 2


MAX_FILE_NAME_LENGTH = platform_max_file_name_length()


def hash_file_name(name: str) -> str:
    """Return a stable, short replacement for ``name``.

    The replacement is the first 16 upper-case hex digits of the SHA-256 of the
    UTF-8 encoded name, followed by the original extension when one exists and
    is at most 16 characters long.

    Examples:
        >>> hash_file_name("photo.png").endswith(".png")
        True
        >>> len(hash_file_name("photo.png"))
        20
    """

    digest = hashlib.sha256(name.encode("utf-8")).hexdigest()[:_HASH_DIGITS].upper()
    suffix = PurePosixPath(name).suffix if name else ""
    if suffix and len(suffix) <= _MAX_KEPT_SUFFIX:
        return digest + suffix
    return digest


def coerce_naming_mode(value: Union[NamingMode, str], entry: str) -> NamingMode:
    """Validate a selector result and return it as :class:`NamingMode`."""

    if isinstance(value, NamingMode):
        return value
    try:
        return NamingMode(value)
    except ValueError:
        raise ConfigError(
            f"Naming mode selector returned {value!r} for entry {entry!r}; "
            f"expected one of {[mode.value for mode in NamingMode]}"
        ) from None


def resolve_file_name(
    base_name: str,
    mode: NamingMode,
    *,
    max_length: int,
    hasher: Callable[[str], str] = hash_file_name,
) -> str:
    """Return the on-disk file name for an entry's ``base_name``.

    Args:
        base_name: Last path segment of the entry as stored in the archive.
        mode: Naming mode chosen for the entry.
        max_length: Longest name, in characters, that may be kept as is.
        hasher: Deterministic replacement function for hashed names.

    Returns:
        The unescaped or original name, or ``hasher`` applied to it when the
        mode is :attr:`NamingMode.HASH` or the name is longer than ``max_length``.
    """

    name = unquote(base_name) if mode is NamingMode.UNESCAPE else base_name
    if mode is NamingMode.HASH or len(name) > max_length:
        hashed = hasher(name)
        if mode is not NamingMode.HASH:
            _LOGGER.debug(
                "hashed over-long file name",
                extra={"stage": "extract", "original": name, "hashed": hashed, "limit": max_length},
            )
        return hashed
    return name


def check_file_name_length(target_path: Path, entry: str, max_length: int) -> None:
    """Raise :class:`NameTooLong` when the file name of ``target_path`` is too long."""

    file_name = target_path.name
    if len(file_name) <= max_length:
        return
    raise NameTooLong(
        error_message(
            ExtractionErrorCode.NAME_TOO_LONG,
            f'"{target_path}", archive entry: "{entry}". Maximum allowed length: {max_length}',
        ),
        target_path=str(target_path),
        entry=entry,
        max_length=max_length,
        code=ExtractionErrorCode.NAME_TOO_LONG.value,
    )
