# === NAVMAP v1 ===
# {
#   "module": "tests.archive_kit.test_cli",
#   "purpose": "Tests for the archivekit command line interface",
#   "sections": [
#     {"id": "extract", "name": "extract command", "anchor": "EXT", "kind": "tests"},
#     {"id": "scan", "name": "scan command", "anchor": "SCN", "kind": "tests"}
#   ]
# }
# === /NAVMAP ===

"""Tests for the archivekit command line interface."""

from __future__ import annotations

import json

from typer.testing import CliRunner

from ArchiveKit import __version__
from ArchiveKit.cli import app
from ArchiveKit.io.naming import hash_file_name

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


# ============================================================================
# extract
# ============================================================================


def test_extract_json_manifest(sample_zip, tmp_path) -> None:
    out = tmp_path / "out"
    result = runner.invoke(
        app,
        ["extract", str(sample_zip), str(out), "--format", "json", "--log-level", "ERROR"],
    )

    assert result.exit_code == 0, result.output
    manifest = json.loads(result.stdout)
    assert manifest == {
        "Images/photo.png": {"output_path": "Images/photo.png", "size": 31924},
        "content.xml": {"output_path": "content.xml", "size": 11584},
    }


def test_extract_with_hash_and_include(sample_zip, tmp_path) -> None:
    out = tmp_path / "out"
    result = runner.invoke(
        app,
        [
            "extract",
            str(sample_zip),
            str(out),
            "--include",
            "Images/*",
            "--hash",
            "Images/*",
            "-f",
            "json",
            "--log-level",
            "ERROR",
        ],
    )

    assert result.exit_code == 0, result.output
    manifest = json.loads(result.stdout)
    assert list(manifest) == ["Images/photo.png"]
    assert manifest["Images/photo.png"]["output_path"] == f"Images/{hash_file_name('photo.png')}"
    assert not (out / "content.xml").exists()


def test_extract_table_output(sample_zip, tmp_path) -> None:
    result = runner.invoke(
        app, ["extract", str(sample_zip), str(tmp_path / "out"), "--log-level", "ERROR"]
    )

    assert result.exit_code == 0, result.output
    assert "content.xml" in result.stdout
    assert "Extracted 2" in result.stdout


def test_extract_rejects_traversal(make_zip, tmp_path) -> None:
    archive = make_zip({"../../evil.txt": b"owned"})

    result = runner.invoke(
        app, ["extract", str(archive), str(tmp_path / "out"), "--log-level", "CRITICAL"]
    )

    assert result.exit_code == 1
    assert "outside" in result.output
    assert not (tmp_path.parent / "evil.txt").exists()


def test_extract_enforces_max_bytes(sample_zip, tmp_path) -> None:
    result = runner.invoke(
        app,
        ["extract", str(sample_zip), str(tmp_path / "out"), "--max-bytes", "100", "--log-level", "CRITICAL"],
    )

    assert result.exit_code == 1
    assert "too big" in result.output
    assert not (tmp_path / "out").exists()


def test_extract_missing_archive(tmp_path) -> None:
    result = runner.invoke(
        app, ["extract", str(tmp_path / "missing.zip"), str(tmp_path / "out"), "--log-level", "ERROR"]
    )
    assert result.exit_code == 1


def test_extract_unknown_format(sample_zip, tmp_path) -> None:
    result = runner.invoke(app, ["extract", str(sample_zip), str(tmp_path / "out"), "-f", "yaml"])
    assert result.exit_code == 2
    assert not (tmp_path / "out").exists()


def test_extract_writes_json_log_file(sample_zip, tmp_path) -> None:
    log_dir = tmp_path / "logs"
    result = runner.invoke(
        app,
        ["extract", str(sample_zip), str(tmp_path / "out"), "--log-dir", str(log_dir), "-f", "json", "--log-level", "INFO"],
    )

    assert result.exit_code == 0, result.output
    records = [
        json.loads(line)
        for log_file in log_dir.glob("archivekit-*.jsonl")
        for line in log_file.read_text(encoding="utf-8").splitlines()
    ]
    summary = [record for record in records if record["message"] == "extracted archive"]
    assert summary and summary[-1]["files_extracted"] == 2


# ============================================================================
# scan
# ============================================================================


def test_scan_lists_entries(sample_zip) -> None:
    result = runner.invoke(app, ["scan", str(sample_zip)])

    assert result.exit_code == 0, result.output
    assert "Images/photo.png" in result.stdout
    assert "43508 bytes declared" in result.stdout


def test_scan_corrupt_archive(tmp_path) -> None:
    bogus = tmp_path / "bogus.zip"
    bogus.write_bytes(b"\x00\x13\x37" * 400)

    result = runner.invoke(app, ["scan", str(bogus)])

    assert result.exit_code == 1
