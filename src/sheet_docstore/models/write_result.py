from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Typed result of a write operation (set_doc / update_doc).

Callers can use the result as a success flag (``if repo.set_doc(...)``) or
inspect ``status`` to tell a missing document apart from a failed store.
"""

__all__ = [
    "WriteStatus",
    "WriteResult",
]


class WriteStatus(Enum):
    CREATED = "created"
    UPDATED = "updated"
    NOT_FOUND = "not_found"
    INVALID_KEY = "invalid_key"
    INVALID_VALUE = "invalid_value"
    ACCESS_ERROR = "access_error"


_SUCCESS = {WriteStatus.CREATED, WriteStatus.UPDATED}


@dataclass(frozen=True)
class WriteResult:
    status: WriteStatus
    row_index: int | None = None  # 1-based data row written, None on failure
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status in _SUCCESS

    def __bool__(self) -> bool:
        return self.ok
