from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Aggregated result of a bulk upsert (``sheet_docstore.services.bulk``)."""

__all__ = [
    "BulkResult",
]


@dataclass(frozen=True)
class BulkResult:
    created: int  # rows appended
    updated: int  # rows overwritten
    failed: int  # documents not written (missing id, invalid key, store error)
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float

    @property
    def total(self) -> int:
        return self.created + self.updated + self.failed

    @property
    def ok(self) -> bool:
        return self.failed == 0
