# === NAVMAP v1 ===
# {
#   "module": "ArchiveKit.io.extraction_policy",
#   "purpose": "Caller-supplied options for a single extraction call",
#   "sections": [
#     {"id": "options", "name": "Extraction Options", "anchor": "OPT", "kind": "pydantic"},
#     {"id": "selectors", "name": "Filters & Naming Selectors", "anchor": "SEL", "kind": "helpers"},
#     {"id": "defaults", "name": "Defaults & Factory", "anchor": "DEF", "kind": "factory"}
#   ]
# }
# === /NAVMAP ===

"""Caller-supplied options for a single extraction call.

:class:`ExtractionOptions` is a frozen Pydantic v2 model, so one instance can be
shared across concurrent calls without any risk of mutation mid-extraction.
The inclusion filter, naming-mode selector, and name hasher are plain callables;
swapping the policy means passing a different function, never editing the loop.
"""

from __future__ import annotations

import fnmatch
from typing import Any, Callable, Dict, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .naming import MAX_FILE_NAME_LENGTH, NamingMode, hash_file_name

__all__ = [
    "DEFAULT_MAX_ALLOWED_DATA_LENGTH",
    "ExtractionOptions",
    "keep_original_names",
    "hash_all_names",
    "glob_file_filter",
    "glob_naming_mode_selector",
    "default_options",
    "strict_options",
]

DEFAULT_MAX_ALLOWED_DATA_LENGTH = 2 * 1024 * 1024 * 1024  # 2 GiB


def keep_original_names(full_path: str) -> NamingMode:
    """Selector that keeps every stored name."""
    return NamingMode.KEEP_ORIGINAL


def hash_all_names(full_path: str) -> NamingMode:
    """Selector that hashes every name."""
    return NamingMode.HASH


def _matches(full_path: str, patterns: Sequence[str]) -> bool:
    return any(fnmatch.fnmatchcase(full_path, pattern) for pattern in patterns)


def glob_file_filter(
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
) -> Callable[[str], bool]:
    """Build an inclusion filter from glob patterns.

    An entry passes when it matches any ``include`` pattern (or ``include`` is
    empty) and no ``exclude`` pattern.  Patterns match the full archive path and
    ``*`` crosses ``/``.

    Examples:
        >>> accept = glob_file_filter(include=["Images/*"], exclude=["*.tmp"])
        >>> accept("Images/photo.png"), accept("Images/x.tmp"), accept("content.xml")
        (True, False, False)
    """

    include = tuple(include)
    exclude = tuple(exclude)

    def _filter(full_path: str) -> bool:
        if include and not _matches(full_path, include):
            return False
        return not _matches(full_path, exclude)

    return _filter


def glob_naming_mode_selector(
    hash_globs: Sequence[str] = (),
    unescape_globs: Sequence[str] = (),
) -> Callable[[str], NamingMode]:
    """Build a naming-mode selector from glob patterns; hashing wins over unescaping."""

    hash_globs = tuple(hash_globs)
    unescape_globs = tuple(unescape_globs)

    def _select(full_path: str) -> NamingMode:
        if _matches(full_path, hash_globs):
            return NamingMode.HASH
        if _matches(full_path, unescape_globs):
            return NamingMode.UNESCAPE
        return NamingMode.KEEP_ORIGINAL

    return _select


class ExtractionOptions(BaseModel):
    """Options for one call to :func:`ArchiveKit.io.filesystem.extract_archive_to_folder`.

    Defaults extract everything, keep stored names, and cap the declared
    archive size at 2 GiB.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",  # Reject unknown fields
    )

    max_allowed_data_length: int = Field(
        default=DEFAULT_MAX_ALLOWED_DATA_LENGTH,
        ge=0,
        description="Maximum total declared uncompressed size, in bytes",
    )

    file_filter: Optional[Callable[[str], bool]] = Field(
        default=None,
        description="Predicate over an entry's full path; None accepts every entry",
    )

    naming_mode_selector: Callable[[str], NamingMode] = Field(
        default=keep_original_names,
        description="Maps an entry's full path to its NamingMode",
    )

    max_file_name_length: int = Field(
        default=MAX_FILE_NAME_LENGTH,
        ge=1,
        le=4096,
        description="Longest on-disk file name in characters; longer names are hashed",
    )

    name_hasher: Callable[[str], str] = Field(
        default=hash_file_name,
        description="Deterministic replacement for hashed names",
    )

    enforce_written_limit: bool = Field(
        default=True,
        description="Also stop once bytes actually written exceed max_allowed_data_length",
    )

    def accepts(self, full_path: str) -> bool:
        """Return ``True`` when the inclusion filter accepts ``full_path``."""
        return self.file_filter is None or bool(self.file_filter(full_path))

    def summary(self) -> Dict[str, Any]:
        """Return a JSON-friendly description for the extraction summary log."""
        return {
            "max_allowed_data_length": self.max_allowed_data_length,
            "max_file_name_length": self.max_file_name_length,
            "enforce_written_limit": self.enforce_written_limit,
            "file_filter": getattr(self.file_filter, "__name__", None),
            "naming_mode_selector": getattr(self.naming_mode_selector, "__name__", None),
            "name_hasher": getattr(self.name_hasher, "__name__", None),
        }


def default_options() -> ExtractionOptions:
    """Factory for the built-in defaults, ignoring environment overrides."""
    return ExtractionOptions()


def strict_options() -> ExtractionOptions:
    """Factory for untrusted archives: 256 MiB ceiling and hashed names throughout."""
    return ExtractionOptions(
        max_allowed_data_length=256 * 1024 * 1024,
        naming_mode_selector=hash_all_names,
        enforce_written_limit=True,
    )
