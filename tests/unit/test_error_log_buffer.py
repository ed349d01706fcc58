from __future__ import annotations
import json
from pathlib import Path
from sheet_docstore.logging.error_log import ErrorRecord, ErrorLogBuffer

KEYS = {"timestamp", "store", "collection", "row", "error_type", "message"}


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create(
        store="people.xlsx",
        collection="People",
        row=-1,
        error_type="ACCESS_ERROR",
        message="sheet not found",
    )
    data = json.loads(rec.to_json_line())
    assert data["store"] == "people.xlsx"
    assert data["collection"] == "People"
    assert data["row"] == -1
    assert data["error_type"] == "ACCESS_ERROR"
    assert data["timestamp"].endswith("Z")
    assert set(data.keys()) == KEYS


def test_error_record_keeps_non_ascii():
    rec = ErrorRecord.create("s", "Người dùng", 2, "NOT_FOUND", "không tìm thấy")
    assert "Người dùng" in rec.to_json_line()


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("s.xlsx", "S", -1, "VALIDATION_ERROR", "key column not found: uid"))
    buf.append(ErrorRecord.create("s.xlsx", "S", -1, "NOT_FOUND", "no document with id=9"))
    path = buf.flush()
    assert path is not None and path.exists()
    assert path.parent == Path("./logs")
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw).keys()) == KEYS
    assert len(buf) == 0
    assert buf.records == []


def test_error_log_buffer_multiple_flushes_same_file(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "custom")
    buf.append(ErrorRecord.create("s", "S", -1, "NOT_FOUND", "a"))
    path = buf.flush()
    size1 = path.stat().st_size
    buf.append(ErrorRecord.create("s", "S", -1, "NOT_FOUND", "b"))
    path2 = buf.flush()
    assert path == path2
    assert path2.stat().st_size > size1
    assert path.parent == temp_workdir / "custom"


def test_empty_flush_creates_no_file(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "empty_logs")
    assert buf.flush() is None
    assert not (temp_workdir / "empty_logs").exists()
