from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

Structured record for a failed step, written as one JSON Lines entry.
`item` is the 0-based index of the input item being processed, or -1
when the failure is not tied to a single item (fetch, batch write,
configuration).
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        spreadsheet: Spreadsheet id the step ran against
        range: A1 range of the step
        item: Input item index (0-based). -1 when not item specific
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Error description
    """
    timestamp: str  # ISO8601 UTC
    spreadsheet: str
    range: str
    item: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(spreadsheet: str, range: str, item: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            spreadsheet=spreadsheet,
            range=range,
            item=item,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON line (fixed key set)."""
        return json.dumps(asdict(self), ensure_ascii=False)
