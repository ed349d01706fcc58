from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping, Sequence

from ..models.document import to_text
from ..models.errors import AccessError
from .adapter import CollectionHandle, CollectionRef, TableSnapshot

"""In-memory storage adapter.

Stores are plain ``{store_id: {collection_name: [[cell, ...], ...]}}`` tables
of strings; row 0 of each collection is the header. Collections keep their
insertion order so "first collection" has the same meaning as for workbooks.
"""

__all__ = [
    "MemoryStorageAdapter",
]


class MemoryStorageAdapter:
    def __init__(
        self,
        stores: Mapping[str, Mapping[str, Iterable[Sequence[object]]]] | None = None,
        default_store: str = "default",
    ) -> None:
        self.default_store = default_store
        self._stores: dict[str, dict[str, list[list[str]]]] = {}
        for store_id, collections in (stores or {}).items():
            for name, rows in collections.items():
                self.add_collection(name, rows, store_id=store_id)

    def add_collection(
        self, name: str, rows: Iterable[Sequence[object]], store_id: str | None = None
    ) -> CollectionHandle:
        """Create or replace a collection. ``rows[0]`` is the header."""
        sid = store_id or self.default_store
        table = [[to_text(v) for v in row] for row in rows]
        self._stores.setdefault(sid, {})[name] = table
        return CollectionHandle(store_id=sid, collection_name=name)

    def snapshot(self, store_id: str | None = None, collection_name: str | None = None) -> list[list[str]]:
        """Deep copy of a raw collection including its header (test helper)."""
        handle = self.open(CollectionRef(store_id, collection_name))
        return copy.deepcopy(self._table(handle))

    def open(self, ref: CollectionRef) -> CollectionHandle:
        sid = ref.store_id or self.default_store
        collections = self._stores.get(sid)
        if collections is None:
            raise AccessError(f"store not found: {sid}")
        if ref.collection_name is None:
            if not collections:
                raise AccessError(f"store has no collections: {sid}")
            return CollectionHandle(store_id=sid, collection_name=next(iter(collections)))
        if ref.collection_name not in collections:
            raise AccessError(f"collection not found: {ref.collection_name}")
        return CollectionHandle(store_id=sid, collection_name=ref.collection_name)

    def _table(self, handle: CollectionHandle) -> list[list[str]]:
        try:
            return self._stores[handle.store_id][handle.collection_name]
        except KeyError as e:
            raise AccessError(f"collection not found: {handle.collection_name}") from e

    def read_all(self, handle: CollectionHandle) -> TableSnapshot:
        table = self._table(handle)
        if not table:
            return TableSnapshot(headers=[], rows=[])
        return TableSnapshot(headers=list(table[0]), rows=[list(r) for r in table[1:]])

    def write_row(self, handle: CollectionHandle, row_index: int, values: Sequence[str]) -> None:
        table = self._table(handle)
        if row_index < 1 or row_index >= len(table):
            raise AccessError(f"row {row_index} out of range in {handle.collection_name}")
        table[row_index] = [to_text(v) for v in values]

    def append_row(self, handle: CollectionHandle, values: Sequence[str]) -> int:
        table = self._table(handle)
        table.append([to_text(v) for v in values])
        return len(table) - 1

    def write_cells(self, handle: CollectionHandle, row_index: int, cells: Mapping[int, str]) -> None:
        table = self._table(handle)
        if row_index < 1 or row_index >= len(table):
            raise AccessError(f"row {row_index} out of range in {handle.collection_name}")
        row = table[row_index]
        width = max(cells, default=-1) + 1
        if len(row) < width:
            row.extend([""] * (width - len(row)))
        for col, value in cells.items():
            row[col] = to_text(value)
