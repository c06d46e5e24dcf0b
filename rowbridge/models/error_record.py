from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

Structured failure record written as one JSON line per error by
``rowbridge.logging.error_log``. ``row=-1`` / ``column=-1`` mark failures that
cannot be pinned to a cell (unreadable file, schema contract violations).
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Source table file being read
        row: Row index (0-based). -1 when unknown
        column: Column index (0-based). -1 when unknown
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Error description including the offending raw text
    """
    timestamp: str  # ISO8601 UTC
    file: str
    row: int
    column: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, row: int, column: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            column=column,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
