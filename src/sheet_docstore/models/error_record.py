from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the diagnostic error log.

Supports row=-1 as a sentinel value for collection-level errors (store not
reachable, missing key column) where no specific row is involved.

Fixed JSON Lines schema: timestamp, store, collection, row, error_type, message.
"""

__all__ = [
    "ErrorRecord",
    "ERROR_TYPES",
]

ERROR_TYPES = frozenset(
    {
        "ACCESS_ERROR",
        "VALIDATION_ERROR",
        "NOT_FOUND",
        "QUERY_ERROR",
        "MISSING_ID",
    }
)


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        store: Store id (workbook path / memory store key), "" for the default store
        collection: Collection (sheet) name, "" for the first collection
        row: 1-based data row. Use -1 when the error is not tied to a row
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str  # ISO8601 UTC
    store: str
    collection: str
    row: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(store: str, collection: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            store=store,
            collection=collection,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON line without extra keys."""
        return json.dumps(asdict(self), ensure_ascii=False)
