from __future__ import annotations

import json

import jsonschema
import pytest

from sheet_docstore.logging.error_log import SCHEMA_PATH
from sheet_docstore.models.error_record import ERROR_TYPES, ErrorRecord

"""Error log JSON schema contract test."""


def _schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


@pytest.mark.parametrize("error_type", sorted(ERROR_TYPES))
def test_generated_records_validate(error_type: str):
    rec = ErrorRecord.create("data/people.xlsx", "People", -1, error_type, "message")
    jsonschema.validate(json.loads(rec.to_json_line()), _schema())


def test_schema_rejects_extra_key():
    record = {
        "timestamp": "2025-09-26T10:12:33Z",
        "store": "people.xlsx",
        "collection": "People",
        "row": 2,
        "error_type": "NOT_FOUND",
        "message": "no document with id=2",
        "extra": "not allowed",
    }
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(record, _schema())


def test_schema_rejects_unknown_error_type():
    record = {
        "timestamp": "2025-09-26T10:12:33Z",
        "store": "",
        "collection": "",
        "row": -1,
        "error_type": "CONSTRAINT_VIOLATION",
        "message": "",
    }
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(record, _schema())
