# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import openpyxl
import pytest

from sheet_docstore.logging.error_log import ErrorLogBuffer
from sheet_docstore.services.repository import Repository
from sheet_docstore.storage.adapter import CollectionRef
from sheet_docstore.storage.memory import MemoryStorageAdapter

PEOPLE_ROWS = [
    ["id", "age", "name"],
    ["1", "10", "Nghia"],
    ["2", "31", "Anh"],
]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        # keep the developer's environment out of config resolution
        monkeypatch.delenv("DOCSTORE_WORKBOOK", raising=False)
        monkeypatch.delenv("DOCSTORE_COLLECTION", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """store:
  backend: excel
  workbook: ./data/people.xlsx
  default_collection: People
key_field: id
array_separator: ","
error_log_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "docstore.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def make_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(name)
        for r, row in enumerate(rows, start=1):
            for c, value in enumerate(row, start=1):
                if value is not None:
                    ws.cell(row=r, column=c, value=value)
    wb.save(path)
    return path


def sheet_values(path: Path, sheet: str) -> list[list[object]]:
    wb = openpyxl.load_workbook(path)
    try:
        return [list(r) for r in wb[sheet].iter_rows(values_only=True)]
    finally:
        wb.close()


@pytest.fixture()
def people_workbook(temp_workdir: Path) -> Path:
    return make_workbook(
        temp_workdir / "data" / "people.xlsx",
        {"People": [list(r) for r in PEOPLE_ROWS], "Other": [["x"], ["y"]]},
    )


@pytest.fixture()
def memory_adapter() -> MemoryStorageAdapter:
    adapter = MemoryStorageAdapter()
    adapter.add_collection("People", PEOPLE_ROWS)
    return adapter


@pytest.fixture()
def error_log(temp_workdir: Path) -> ErrorLogBuffer:
    return ErrorLogBuffer(temp_workdir / "logs")


@pytest.fixture()
def memory_repo(memory_adapter: MemoryStorageAdapter, error_log: ErrorLogBuffer) -> Repository:
    return Repository(memory_adapter, CollectionRef(collection_name="People"), error_log=error_log)


@pytest.fixture()
def workbook_factory():
    return make_workbook


@pytest.fixture()
def read_sheet():
    return sheet_values
