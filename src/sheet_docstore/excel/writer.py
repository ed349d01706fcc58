from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

import openpyxl
from openpyxl.utils.exceptions import IllegalCharacterError
from openpyxl.worksheet.worksheet import Worksheet

from ..models.errors import AccessError, InvalidValueError
from .reader import load_workbook

"""Excel writer.

Each call loads the workbook, changes the addressed cells and saves it back.
Data-row index 1 is sheet row 2. Values are written as text cells, so a value
starting with "=" is stored as a string and never turned into a formula.

Formulas in untouched cells keep their text, but openpyxl drops their cached
results on save (see ``reader.read_workbook`` for how such cells are read).
"""

__all__ = [
    "create_workbook",
    "write_row",
    "write_cells",
    "append_row",
]


def _sheet(wb: openpyxl.Workbook, sheet_name: str) -> Worksheet:
    if sheet_name not in wb.sheetnames:
        raise AccessError(f"sheet not found: {sheet_name}")
    return wb[sheet_name]


def _save(wb: openpyxl.Workbook, path: Path) -> None:
    try:
        wb.save(path)
    except OSError as e:
        raise AccessError(f"cannot save workbook {path}: {e}") from e


def _put_text(ws: Worksheet, row: int, cells: Iterable[tuple[int, str]]) -> None:
    """Assign ``(1-based column, text)`` pairs on sheet row ``row``.

    Raises InvalidValueError for text holding characters a worksheet cannot
    store (XML control characters). Nothing is saved in that case.
    """
    for column, value in cells:
        try:
            cell = ws.cell(row=row, column=column, value=value)
        except IllegalCharacterError as e:
            raise InvalidValueError(f"illegal character in value for column {column}: {value!r}") from e
        if isinstance(value, str) and value.startswith("="):
            cell.data_type = "s"


def _last_content_row(ws: Worksheet) -> int:
    """Sheet row number of the last row holding any non-empty cell (0 if none)."""
    for row_no in range(ws.max_row, 0, -1):
        for cell in ws[row_no]:
            if cell.value is not None and cell.value != "":
                return row_no
    return 0


def create_workbook(path: Path, sheet_name: str, headers: Sequence[str]) -> None:
    """Create the workbook (if missing) and a sheet holding only the header row.

    An existing sheet with the same name is left untouched.
    """
    if path.exists():
        wb = load_workbook(path)
    else:
        path.parent.mkdir(parents=True, exist_ok=True)
        wb = openpyxl.Workbook()
        wb.remove(wb.active)
    try:
        if sheet_name in wb.sheetnames:
            return
        ws = wb.create_sheet(sheet_name)
        _put_text(ws, 1, enumerate(headers, start=1))
        _save(wb, path)
    finally:
        wb.close()


def write_row(path: Path, sheet_name: str, row_index: int, values: Sequence[str]) -> None:
    wb = load_workbook(path)
    try:
        ws = _sheet(wb, sheet_name)
        _put_text(ws, row_index + 1, enumerate(values, start=1))
        _save(wb, path)
    finally:
        wb.close()


def write_cells(path: Path, sheet_name: str, row_index: int, cells: Mapping[int, str]) -> None:
    wb = load_workbook(path)
    try:
        ws = _sheet(wb, sheet_name)
        _put_text(ws, row_index + 1, ((col + 1, value) for col, value in cells.items()))
        _save(wb, path)
    finally:
        wb.close()


def append_row(path: Path, sheet_name: str, values: Sequence[str]) -> int:
    """Write ``values`` right after the last non-blank row; returns the data-row index."""
    wb = load_workbook(path)
    try:
        ws = _sheet(wb, sheet_name)
        sheet_row = max(_last_content_row(ws), 1) + 1
        _put_text(ws, sheet_row, enumerate(values, start=1))
        _save(wb, path)
    finally:
        wb.close()
    return sheet_row - 1
