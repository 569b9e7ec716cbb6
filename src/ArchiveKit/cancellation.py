"""Cooperative cancellation for long-running extraction calls.

The extraction loop never interrupts a copy in flight.  Instead it checks a
:class:`CancellationToken` once per archive entry, so a cancelled call stops at
the next entry boundary and already extracted files stay on disk.  Tokens are
thread-safe because :func:`ArchiveKit.io.filesystem.extract_archive_to_folder_async`
runs the loop on a worker thread while the event loop owns the token.
"""

from __future__ import annotations

import threading
from typing import Optional

from .errors import OperationCancelled

__all__ = ["CancellationToken", "CancellationTokenGroup"]


class CancellationToken:
    """Thread-safe flag checked by the extraction loop between entries.

    Examples:
        >>> token = CancellationToken()
        >>> token.is_cancelled()
        False
        >>> token.cancel()
        >>> token.is_cancelled()
        True
    """

    def __init__(self) -> None:
        self._is_cancelled = threading.Event()
        self._lock = threading.Lock()
        self._reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        """Signal that cancellation has been requested."""
        with self._lock:
            if not self._is_cancelled.is_set():
                self._reason = reason
            self._is_cancelled.set()

    def is_cancelled(self) -> bool:
        """Return ``True`` once :meth:`cancel` has been called."""
        return self._is_cancelled.is_set()

    @property
    def reason(self) -> Optional[str]:
        """Reason passed to the first :meth:`cancel` call, if any."""
        return self._reason

    def raise_if_cancelled(self, entry: Optional[str] = None) -> None:
        """Raise :class:`OperationCancelled` when cancellation was requested.

        Args:
            entry: Archive entry about to be processed, recorded on the error.
        """
        if not self.is_cancelled():
            return
        # Deferred import: ArchiveKit.io imports this module.
        from .io.extraction_telemetry import ExtractionErrorCode, error_message

        detail = self._reason or ""
        if entry is not None:
            detail = f"{detail} (before entry {entry!r})" if detail else f"before entry {entry!r}"
        raise OperationCancelled(
            error_message(ExtractionErrorCode.CANCELLED, detail),
            code=ExtractionErrorCode.CANCELLED.value,
            entry=entry,
        )

    def reset(self) -> None:
        """Clear the token so it can be reused; intended for tests."""
        with self._lock:
            self._is_cancelled.clear()
            self._reason = None


class CancellationTokenGroup:
    """Tokens for a batch of extraction calls that are stopped together.

    Tokens added after :meth:`cancel_all` start out cancelled, so a batch that
    is still scheduling work cannot start new extractions once it was stopped.
    """

    def __init__(self) -> None:
        self._tokens: list[CancellationToken] = []
        self._lock = threading.Lock()
        self._cancel_reason: Optional[str] = None
        self._cancelled = False

    def add_token(self, token: CancellationToken) -> None:
        """Add ``token`` to the group, cancelling it if the group already was."""
        with self._lock:
            self._tokens.append(token)
            if self._cancelled:
                token.cancel(self._cancel_reason)

    def create_token(self) -> CancellationToken:
        """Create a token that belongs to this group."""
        token = CancellationToken()
        self.add_token(token)
        return token

    def remove_token(self, token: CancellationToken) -> None:
        """Release ``token`` once its extraction finished; unknown tokens are ignored."""
        with self._lock:
            if token in self._tokens:
                self._tokens.remove(token)

    def cancel_all(self, reason: Optional[str] = None) -> None:
        """Cancel every token in the group and any token added later."""
        with self._lock:
            self._cancelled = True
            self._cancel_reason = reason
            for token in self._tokens:
                token.cancel(reason)

    def is_any_cancelled(self) -> bool:
        """Return ``True`` when at least one member token is cancelled."""
        with self._lock:
            return any(token.is_cancelled() for token in self._tokens)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)
