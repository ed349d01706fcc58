from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import openpyxl
import pytest

from sheet_docstore.excel import writer
from sheet_docstore.excel.writer import create_workbook
from sheet_docstore.models.errors import AccessError, InvalidValueError
from sheet_docstore.storage.adapter import CollectionRef, StorageAdapter
from sheet_docstore.storage.excel import ExcelStorageAdapter


def test_satisfies_protocol():
    assert isinstance(ExcelStorageAdapter(), StorageAdapter)


def test_open_default_workbook_first_sheet(people_workbook: Path):
    adapter = ExcelStorageAdapter(people_workbook)
    handle = adapter.open(CollectionRef())
    assert handle.store_id == str(people_workbook)
    assert handle.collection_name == "People"
    other = adapter.open(CollectionRef(collection_name="Other"))
    assert other.collection_name == "Other"


def test_open_failures(people_workbook: Path, temp_workdir: Path):
    with pytest.raises(AccessError):
        ExcelStorageAdapter().open(CollectionRef())  # no default workbook
    with pytest.raises(AccessError):
        ExcelStorageAdapter(temp_workdir / "missing.xlsx").open(CollectionRef())
    with pytest.raises(AccessError):
        ExcelStorageAdapter(people_workbook).open(CollectionRef(collection_name="Nope"))


def test_read_all(people_workbook: Path):
    adapter = ExcelStorageAdapter(people_workbook)
    snap = adapter.read_all(adapter.open(CollectionRef(collection_name="People")))
    assert snap.headers == ["id", "age", "name"]
    assert snap.rows == [["1", "10", "Nghia"], ["2", "31", "Anh"]]


def test_writes_hit_the_file(people_workbook: Path, read_sheet):
    adapter = ExcelStorageAdapter(people_workbook)
    handle = adapter.open(CollectionRef(collection_name="People"))
    adapter.write_row(handle, 2, ["2", "32", "Anh"])
    assert adapter.append_row(handle, ["3", "5", "Bao"]) == 3
    adapter.write_cells(handle, 1, {1: "11"})
    assert read_sheet(people_workbook, "People") == [
        ["id", "age", "name"],
        ["1", "11", "Nghia"],
        ["2", "32", "Anh"],
        ["3", "5", "Bao"],
    ]
    # the other sheet is untouched
    assert read_sheet(people_workbook, "Other") == [["x"], ["y"]]


def test_write_cells_preserves_formulas(temp_workdir: Path, workbook_factory):
    path = workbook_factory(
        temp_workdir / "f.xlsx", {"S": [["id", "a", "total"], ["1", 2, "=B2*2"]]}
    )
    adapter = ExcelStorageAdapter(path)
    handle = adapter.open(CollectionRef())
    adapter.write_cells(handle, 1, {0: "9"})
    wb = openpyxl.load_workbook(path)
    assert wb["S"]["C2"].value == "=B2*2"
    assert wb["S"]["A2"].value == "9"


def test_append_after_trailing_formatted_rows(temp_workdir: Path, workbook_factory, read_sheet):
    path = workbook_factory(temp_workdir / "t.xlsx", {"S": [["id"], ["1"]]})
    wb = openpyxl.load_workbook(path)
    wb["S"]["A10"].number_format = "0.00"  # style only, no value
    wb.save(path)
    adapter = ExcelStorageAdapter(path)
    handle = adapter.open(CollectionRef())
    assert adapter.append_row(handle, ["2"]) == 2
    assert adapter.read_all(handle).rows == [["1"], ["2"]]


def test_invalid_row_index(people_workbook: Path):
    adapter = ExcelStorageAdapter(people_workbook)
    handle = adapter.open(CollectionRef())
    with pytest.raises(AccessError):
        adapter.write_row(handle, 0, ["x"])
    with pytest.raises(AccessError):
        adapter.write_cells(handle, -1, {0: "x"})


def test_create_workbook_new_and_existing(temp_workdir: Path, read_sheet):
    path = temp_workdir / "new" / "store.xlsx"
    create_workbook(path, "Users", ["id", "email"])
    assert read_sheet(path, "Users") == [["id", "email"]]
    create_workbook(path, "Orders", ["id", "user_id"])
    create_workbook(path, "Users", ["ignored"])  # existing sheet untouched
    assert read_sheet(path, "Users") == [["id", "email"]]
    assert read_sheet(path, "Orders") == [["id", "user_id"]]


def test_uncached_formula_reads_as_its_text(temp_workdir: Path, workbook_factory):
    path = workbook_factory(
        temp_workdir / "f.xlsx", {"S": [["id", "a", "total"], ["1", 2, "=B2*2"], ["2", 3, "=B3*2"]]}
    )
    adapter = ExcelStorageAdapter(path)
    handle = adapter.open(CollectionRef())
    assert adapter.read_all(handle).rows == [["1", "2", "=B2*2"], ["2", "3", "=B3*2"]]
    adapter.write_cells(handle, 1, {0: "9"})
    assert adapter.read_all(handle).rows == [["9", "2", "=B2*2"], ["2", "3", "=B3*2"]]


def test_illegal_character_raises_invalid_value(people_workbook: Path, read_sheet):
    adapter = ExcelStorageAdapter(people_workbook)
    handle = adapter.open(CollectionRef(collection_name="People"))
    before = read_sheet(people_workbook, "People")
    with pytest.raises(InvalidValueError):
        adapter.append_row(handle, ["3", "5", "Bao\x07"])
    with pytest.raises(InvalidValueError):
        adapter.write_cells(handle, 1, {2: "\x1f"})
    assert read_sheet(people_workbook, "People") == before


@pytest.mark.parametrize(
    "call",
    [
        lambda path: writer.write_row(path, "Nope", 1, ["x"]),
        lambda path: writer.write_cells(path, "Nope", 1, {0: "x"}),
        lambda path: writer.append_row(path, "Nope", ["x"]),
    ],
)
def test_writer_closes_workbook_on_missing_sheet(people_workbook: Path, monkeypatch, call):
    opened = []

    def tracking_load(path):
        wb = openpyxl.load_workbook(path)
        wb.close = MagicMock()
        opened.append(wb)
        return wb

    monkeypatch.setattr(writer, "load_workbook", tracking_load)
    with pytest.raises(AccessError):
        call(people_workbook)
    assert opened and opened[0].close.called
