"""Shared fixtures for the archive_kit test suite."""

from __future__ import annotations

import io
import logging
import os
import tarfile
import zipfile
from pathlib import Path
from typing import Callable, Dict, Optional

import pytest

from ArchiveKit.settings import invalidate_default_options

CONTENT_XML_SIZE = 11584
PHOTO_PNG_SIZE = 31924

Entries = Dict[str, Optional[bytes]]


def _payload(size: int, seed: int = 0) -> bytes:
    pattern = bytes((seed + index * 7) % 251 for index in range(251))
    repeats = size // len(pattern) + 1
    return (pattern * repeats)[:size]


def _build_zip(path: Path, entries: Entries) -> Path:
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zipf:
        for name, data in entries.items():
            info = zipfile.ZipInfo(name)
            if data is None:
                zipf.writestr(info, b"")
            else:
                info.external_attr = 0o644 << 16
                info.compress_type = zipfile.ZIP_DEFLATED
                zipf.writestr(info, data)
    return path


def _build_tar(path: Path, entries: Entries, mode: str = "w") -> Path:
    with tarfile.open(path, mode) as tar:
        for name, data in entries.items():
            info = tarfile.TarInfo(name)
            if data is None:
                info.type = tarfile.DIRTYPE
                tar.addfile(info)
            else:
                info.size = len(data)
                tar.addfile(info, io.BytesIO(data))
    return path


@pytest.fixture
def payload() -> Callable[..., bytes]:
    """Return a factory for deterministic payloads of a given size."""
    return _payload


@pytest.fixture
def make_zip(tmp_path) -> Callable[..., Path]:
    """Return ``make_zip(entries, name=...)``; ``None`` values become directory markers."""

    def _make(entries: Entries, name: str = "archive.zip") -> Path:
        return _build_zip(tmp_path / name, entries)

    return _make


@pytest.fixture
def make_tar(tmp_path) -> Callable[..., Path]:
    """Return ``make_tar(entries, name=..., mode=...)``; ``None`` values become directories."""

    def _make(entries: Entries, name: str = "archive.tar", mode: str = "w") -> Path:
        return _build_tar(tmp_path / name, entries, mode)

    return _make


@pytest.fixture
def sample_zip(tmp_path) -> Path:
    """``content.xml`` (11584 bytes) at the root, ``Images/photo.png`` (31924 bytes) below a marker."""

    return _build_zip(
        tmp_path / "sample.zip",
        {
            "content.xml": _payload(CONTENT_XML_SIZE, seed=1),
            "Images/": None,
            "Images/photo.png": _payload(PHOTO_PNG_SIZE, seed=2),
        },
    )


@pytest.fixture(autouse=True)
def _reset_archivekit_state(monkeypatch):
    """Isolate environment overrides and logger configuration between tests."""

    for name in list(os.environ):
        if name.startswith("ARCHIVEKIT_"):
            monkeypatch.delenv(name, raising=False)
    invalidate_default_options()
    yield
    invalidate_default_options()
    logger = logging.getLogger("ArchiveKit")
    for handler in list(logger.handlers):
        if getattr(handler, "_archivekit_managed", False):
            logger.removeHandler(handler)
            handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
