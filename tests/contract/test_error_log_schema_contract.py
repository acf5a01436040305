from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest

from crm_validator.models.error_record import ErrorRecord

"""Error log JSON Lines schema contract (contracts/error_log_schema.json)."""

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "contracts" / "error_log_schema.json"


def _schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_error_record_line_matches_schema():
    rec = ErrorRecord.create("leads.xlsx", "", 7, "ROW_PROCESSING_ERROR", "boom")
    jsonschema.validate(json.loads(rec.to_json_line()), _schema())


def test_file_level_record_matches_schema():
    rec = ErrorRecord.create("broken.xlsx", "Leads", -1, "FILE_READ_ERROR", "bad zip")
    jsonschema.validate(json.loads(rec.to_json_line()), _schema())


def test_schema_rejects_extra_key():
    record = {
        "timestamp": "2025-09-26T10:12:33Z",
        "file": "leads.xlsx",
        "sheet": "",
        "row": 2,
        "error_type": "ROW_PROCESSING_ERROR",
        "message": "boom",
        "extra": "not allowed",
    }
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(record, _schema())


def test_schema_rejects_lowercase_error_type():
    record = {
        "timestamp": "2025-09-26T10:12:33Z",
        "file": "leads.xlsx",
        "sheet": "",
        "row": 2,
        "error_type": "row_error",
        "message": "boom",
    }
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(record, _schema())
