from __future__ import annotations

import zipfile
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import openpyxl
import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.formula import ArrayFormula
from openpyxl.worksheet.worksheet import Worksheet

from ..models.document import to_text
from ..models.errors import AccessError

"""Excel reader.

Row 1 of a sheet is the header row, rows 2.. are data rows. Every cell is
converted to display text. Row positions are kept exactly (blank rows in the
middle are returned as rows of empty strings) because writes address rows by
position; only trailing blank rows are dropped.

The workbook is read through openpyxl and each sheet becomes an object-dtype
DataFrame, so pandas never re-types or skips cells.

Formula cells read as their cached result. openpyxl does not compute formulas
and drops cached results whenever it saves, so a formula cell without a cached
result reads as its formula text (e.g. "=B2*2") instead of "".
"""

__all__ = [
    "SheetData",
    "load_workbook",
    "read_workbook",
    "normalize_sheet",
]


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[list[str]] = field(default_factory=list)  # display text, header excluded


def load_workbook(path: Path, *, data_only: bool = False) -> openpyxl.Workbook:
    """Open a workbook, converting I/O and format failures to AccessError."""
    if not path.exists():
        raise AccessError(f"workbook not found: {path}")
    try:
        return openpyxl.load_workbook(path, data_only=data_only)
    except (OSError, zipfile.BadZipFile, InvalidFileException, KeyError) as e:
        raise AccessError(f"cannot open workbook {path}: {e}") from e


def read_workbook(path: Path, target_sheets: Iterable[str] | None = None) -> dict[str, pd.DataFrame]:
    """Read a workbook returning raw DataFrames keyed by sheet name, in sheet order.

    Parameters
    ----------
    path: workbook path
    target_sheets: restrict to these sheet names (None means all sheets)
    """
    wanted = set(target_sheets) if target_sheets is not None else None
    # data_only: formulas are read as their last computed value
    wb = load_workbook(path, data_only=True)
    try:
        formulas = load_workbook(path)
    except AccessError:
        wb.close()
        raise
    try:
        dfs: dict[str, pd.DataFrame] = {}
        for ws in wb.worksheets:
            if wanted is not None and ws.title not in wanted:
                continue
            dfs[ws.title] = pd.DataFrame(_sheet_values(ws, formulas[ws.title]), dtype=object)
        return dfs
    finally:
        wb.close()
        formulas.close()


def _formula_text(raw: object) -> object:
    if isinstance(raw, ArrayFormula):
        return raw.text
    if isinstance(raw, str) and raw.startswith("="):
        return raw
    return None


def _sheet_values(cached: Worksheet, raw: Worksheet) -> list[list[object]]:
    """Cell values of ``cached``; uncached formula cells take their text from ``raw``."""
    rows = []
    for cached_row, raw_row in zip(cached.values, raw.values):
        rows.append([_formula_text(r) if v is None else v for v, r in zip(cached_row, raw_row)])
    return rows


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    # NaN only appears if a caller hands in a DataFrame built elsewhere
    if isinstance(value, float) and pd.isna(value):
        return ""
    return to_text(value)


def normalize_sheet(df: pd.DataFrame, sheet_name: str) -> SheetData:
    """Split a raw DataFrame into header + data rows of display text.

    Steps:
    1. Empty frame -> no columns, no rows
    2. Row 0 -> header (blank header cells kept as "" to preserve positions)
    3. Rows 1.. -> data rows, trailing all-blank rows dropped
    """
    if df.shape[0] == 0:
        return SheetData(sheet_name=sheet_name, columns=[], rows=[])
    text = [[_cell_text(v) for v in raw] for raw in df.itertuples(index=False, name=None)]
    columns = text[0]
    rows = text[1:]
    while rows and all(c == "" for c in rows[-1]):
        rows.pop()
    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)
