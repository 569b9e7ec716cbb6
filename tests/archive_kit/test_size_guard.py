"""Tests for the declared-size ceiling and the written-byte budget."""

from __future__ import annotations

import pytest

from ArchiveKit.errors import SizeLimitExceeded
from ArchiveKit.io.archive_reader import ArchiveEntry, EntryKind, scan_entries
from ArchiveKit.io.size_guard import WrittenBytesBudget, check_declared_size


def _entries(*sizes: int):
    return [ArchiveEntry(full_path=f"f{index}", length=size) for index, size in enumerate(sizes)]


def test_declared_total_within_limit() -> None:
    assert check_declared_size(_entries(10, 20, 0), 30) == 30


def test_declared_total_over_limit() -> None:
    with pytest.raises(SizeLimitExceeded, match="31 bytes") as excinfo:
        check_declared_size(_entries(10, 21), 30)
    assert excinfo.value.size == 31
    assert excinfo.value.limit == 30


def test_empty_archive_passes_zero_limit() -> None:
    assert check_declared_size([], 0) == 0


def test_budget_counts_without_limit() -> None:
    budget = WrittenBytesBudget(None)
    budget.charge(10**12, "huge.bin")
    assert budget.written == 10**12


def test_budget_raises_once_over_limit() -> None:
    budget = WrittenBytesBudget(100)
    budget.charge(60, "a")
    budget.charge(40, "b")
    with pytest.raises(SizeLimitExceeded) as excinfo:
        budget.charge(1, "c")
    assert excinfo.value.entry == "c"
    assert excinfo.value.code == "E_WRITTEN_TOO_LARGE"


def test_scan_entries_reports_declared_sizes(make_zip) -> None:
    archive = make_zip({"Images/": None, "Images/photo.png": b"x" * 300, "a.txt": b"abc"})

    entries = scan_entries(archive)

    assert [entry.full_path.rstrip("/") for entry in entries] == ["Images", "Images/photo.png", "a.txt"]
    assert [entry.length for entry in entries] == [0, 300, 3]
    assert entries[0].kind is EntryKind.DIRECTORY


def test_archive_entry_directory_by_trailing_separator() -> None:
    entry = ArchiveEntry(full_path="Images/", length=0, kind=EntryKind.DIRECTORY)
    assert entry.is_directory
