from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from ..excel import writer
from ..excel.reader import load_workbook, normalize_sheet, read_workbook
from ..models.errors import AccessError
from .adapter import CollectionHandle, CollectionRef, TableSnapshot

"""Excel workbook storage adapter.

store_id is a workbook path, collection_name a worksheet title. There is no
caching: every read re-loads the workbook and every write saves it.
"""

__all__ = [
    "ExcelStorageAdapter",
]

logger = logging.getLogger(__name__)


class ExcelStorageAdapter:
    def __init__(self, default_workbook: str | Path | None = None) -> None:
        self.default_workbook = str(default_workbook) if default_workbook is not None else None

    def _path(self, store_id: str | None) -> Path:
        sid = store_id or self.default_workbook
        if not sid:
            raise AccessError("no workbook given and no default workbook configured")
        return Path(sid)

    def open(self, ref: CollectionRef) -> CollectionHandle:
        path = self._path(ref.store_id)
        wb = load_workbook(path, data_only=True)
        try:
            names = list(wb.sheetnames)
        finally:
            wb.close()
        if ref.collection_name is None:
            if not names:  # pragma: no cover (openpyxl refuses to save sheetless workbooks)
                raise AccessError(f"workbook has no sheets: {path}")
            name = names[0]
        elif ref.collection_name in names:
            name = ref.collection_name
        else:
            raise AccessError(f"sheet not found: {ref.collection_name} in {path}")
        logger.debug("opened %s[%s]", path, name)
        return CollectionHandle(store_id=str(path), collection_name=name)

    def read_all(self, handle: CollectionHandle) -> TableSnapshot:
        dfs = read_workbook(Path(handle.store_id), target_sheets=[handle.collection_name])
        if handle.collection_name not in dfs:
            raise AccessError(f"sheet not found: {handle.collection_name}")
        sheet = normalize_sheet(dfs[handle.collection_name], handle.collection_name)
        return TableSnapshot(headers=sheet.columns, rows=sheet.rows)

    def write_row(self, handle: CollectionHandle, row_index: int, values: Sequence[str]) -> None:
        if row_index < 1:
            raise AccessError(f"invalid row index: {row_index}")
        writer.write_row(Path(handle.store_id), handle.collection_name, row_index, values)

    def append_row(self, handle: CollectionHandle, values: Sequence[str]) -> int:
        return writer.append_row(Path(handle.store_id), handle.collection_name, values)

    def write_cells(self, handle: CollectionHandle, row_index: int, cells: Mapping[int, str]) -> None:
        if row_index < 1:
            raise AccessError(f"invalid row index: {row_index}")
        writer.write_cells(Path(handle.store_id), handle.collection_name, row_index, cells)
