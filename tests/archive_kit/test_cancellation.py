# === NAVMAP v1 ===
# {
#   "module": "tests.archive_kit.test_cancellation",
#   "purpose": "Tests for the cancellation token checked by the extraction loop.",
#   "sections": [
#     {"id": "tests", "name": "Test Cases", "anchor": "TST", "kind": "tests"}
#   ]
# }
# === /NAVMAP ===

"""Tests for the cancellation token checked by the extraction loop."""

import threading

import pytest

from ArchiveKit import extract_archive_to_folder
from ArchiveKit.cancellation import CancellationToken, CancellationTokenGroup
from ArchiveKit.errors import OperationCancelled


def test_fresh_token_does_not_raise() -> None:
    token = CancellationToken()
    token.raise_if_cancelled("content.xml")
    assert token.reason is None


def test_cancelled_token_raises_with_entry_and_reason() -> None:
    token = CancellationToken()
    token.cancel("user pressed stop")

    with pytest.raises(OperationCancelled, match="user pressed stop") as excinfo:
        token.raise_if_cancelled("Images/photo.png")

    assert excinfo.value.entry == "Images/photo.png"
    assert excinfo.value.code == "E_CANCELLED"
    assert "Images/photo.png" in str(excinfo.value)


def test_first_reason_wins() -> None:
    token = CancellationToken()
    token.cancel("first")
    token.cancel("second")
    assert token.reason == "first"


def test_reset_clears_cancellation() -> None:
    token = CancellationToken()
    token.cancel()
    token.reset()
    assert not token.is_cancelled()
    token.raise_if_cancelled()


def test_cancel_from_another_thread_is_visible() -> None:
    token = CancellationToken()
    worker = threading.Thread(target=token.cancel, args=("worker",))
    worker.start()
    worker.join()

    assert token.is_cancelled()
    with pytest.raises(OperationCancelled, match="Extraction was cancelled"):
        token.raise_if_cancelled()


def test_tokens_created_after_cancel_all_are_cancelled() -> None:
    """Tokens joining a stopped group should start in a cancelled state."""

    group = CancellationTokenGroup()
    first = group.create_token()
    assert not group.is_any_cancelled()

    group.cancel_all("batch aborted")

    second = group.create_token()
    third = CancellationToken()
    group.add_token(third)
    assert first.is_cancelled() and second.is_cancelled() and third.is_cancelled()
    assert third.reason == "batch aborted"
    assert len(group) == 3


def test_remove_token_is_idempotent() -> None:
    group = CancellationTokenGroup()
    token = group.create_token()

    group.remove_token(token)
    group.remove_token(token)
    group.cancel_all()

    assert len(group) == 0
    assert not token.is_cancelled()


def test_group_cancellation_stops_extractions(sample_zip, tmp_path) -> None:
    group = CancellationTokenGroup()
    tokens = [group.create_token() for _ in range(2)]
    group.cancel_all("shutting down")

    for index, token in enumerate(tokens):
        with pytest.raises(OperationCancelled, match="shutting down"):
            extract_archive_to_folder(sample_zip, tmp_path / f"out{index}", cancellation_token=token)
        assert not any((tmp_path / f"out{index}").iterdir())
