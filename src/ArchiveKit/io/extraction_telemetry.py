# === NAVMAP v1 ===
# {
#   "module": "ArchiveKit.io.extraction_telemetry",
#   "purpose": "Error codes, metrics, and message helpers for archive extraction",
#   "sections": [
#     {"id": "errors", "name": "Error Codes", "anchor": "ERR", "kind": "constants"},
#     {"id": "metrics", "name": "Extraction Metrics", "anchor": "MET", "kind": "dataclass"},
#     {"id": "messages", "name": "Error Message Helpers", "anchor": "MSG", "kind": "helpers"}
#   ]
# }
# === /NAVMAP ===

"""Error codes, metrics, and message helpers for archive extraction.

Every failure raised by the extraction loop carries one of the
:class:`ExtractionErrorCode` values so log records and callers can key on a
stable identifier instead of parsing messages.  :class:`ExtractionMetrics`
accumulates the counters that are logged when a call finishes.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

# ============================================================================
# ERROR CODES
# ============================================================================


class ExtractionErrorCode(str, Enum):
    """Error codes attached to extraction failures."""

    # Size Guard
    ARCHIVE_TOO_LARGE = "E_ARCHIVE_TOO_LARGE"  # Declared total over ceiling
    WRITTEN_TOO_LARGE = "E_WRITTEN_TOO_LARGE"  # Bytes written over ceiling

    # Path Validator
    TRAVERSAL = "E_TRAVERSAL"  # Target escapes destination root

    # Name Resolver
    NAME_TOO_LONG = "E_NAME_TOO_LONG"  # Resolved name longer than maximum

    # Entry types
    ENTRY_TYPE = "E_ENTRY_TYPE"  # Link, device, FIFO, or socket

    # Control
    CANCELLED = "E_CANCELLED"  # Cooperative cancellation observed


# ============================================================================
# METRICS
# ============================================================================


@dataclass
class ExtractionMetrics:
    """Counters collected over a single extraction call."""

    archive: str = ""
    start_time: float = field(default_factory=time.monotonic)
    end_time: Optional[float] = None
    entries_total: int = 0
    entries_filtered: int = 0
    files_extracted: int = 0
    directories_created: int = 0
    bytes_declared: int = 0
    bytes_written: int = 0

    @property
    def duration_ms(self) -> float:
        """Duration in milliseconds."""
        end = self.end_time if self.end_time is not None else time.monotonic()
        return (end - self.start_time) * 1000

    def finalize(self) -> None:
        """Mark metrics as complete."""
        self.end_time = time.monotonic()

    def to_log_extra(self) -> Dict[str, Any]:
        """Return the counters as a ``logging`` ``extra`` payload."""
        payload = asdict(self)
        payload.pop("start_time")
        payload.pop("end_time")
        payload["stage"] = "extract"
        payload["duration_ms"] = round(self.duration_ms, 2)
        return payload


# ============================================================================
# ERROR MESSAGE HELPERS
# ============================================================================


def error_message(code: ExtractionErrorCode, detail: str = "") -> str:
    """Generate a descriptive error message for an error code.

    Args:
        code: The error code
        detail: Additional detail to append

    Returns:
        Human-readable error message
    """
    messages = {
        ExtractionErrorCode.ARCHIVE_TOO_LARGE: "Archive data is too big",
        ExtractionErrorCode.WRITTEN_TOO_LARGE: "Extracted data exceeds the allowed size",
        ExtractionErrorCode.TRAVERSAL: "Entry is outside target directory",
        ExtractionErrorCode.NAME_TOO_LONG: "Too long target file name",
        ExtractionErrorCode.ENTRY_TYPE: "Entry type is not supported",
        ExtractionErrorCode.CANCELLED: "Extraction was cancelled",
    }
    msg = messages.get(code, str(code))
    if detail:
        msg += f": {detail}"
    return msg
