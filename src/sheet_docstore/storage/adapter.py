from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

"""Storage adapter contract.

An adapter resolves a logical collection reference to a handle and exposes raw
reads and writes of the header row and data rows. Adapters never cache: each
call goes to the live store. Failures to resolve or reach the store raise
``AccessError``.

Row indexes are 1-based data-row positions (1 = first row after the header).
"""

__all__ = [
    "CollectionRef",
    "CollectionHandle",
    "TableSnapshot",
    "StorageAdapter",
]


@dataclass(frozen=True)
class CollectionRef:
    """Logical collection reference.

    store_id=None means the adapter's default store; collection_name=None means
    the first collection of that store.
    """
    store_id: str | None = None
    collection_name: str | None = None

    def describe(self) -> tuple[str, str]:
        return (self.store_id or "", self.collection_name or "")


@dataclass(frozen=True)
class CollectionHandle:
    """Resolved collection: concrete store id and collection name."""
    store_id: str
    collection_name: str


@dataclass(frozen=True)
class TableSnapshot:
    headers: list[str]
    rows: list[list[str]] = field(default_factory=list)


@runtime_checkable
class StorageAdapter(Protocol):
    def open(self, ref: CollectionRef) -> CollectionHandle:
        ...

    def read_all(self, handle: CollectionHandle) -> TableSnapshot:
        ...

    def write_row(self, handle: CollectionHandle, row_index: int, values: Sequence[str]) -> None:
        ...

    def append_row(self, handle: CollectionHandle, values: Sequence[str]) -> int:
        """Append a row and return its 1-based data-row index."""
        ...

    def write_cells(self, handle: CollectionHandle, row_index: int, cells: Mapping[int, str]) -> None:
        """Overwrite single cells; keys are 0-based column indexes."""
        ...
