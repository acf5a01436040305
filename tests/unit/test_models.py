from __future__ import annotations

import json
from datetime import UTC, datetime

from crm_validator.models import (
    DEFAULT_VALIDATION_CONFIG,
    ErrorRecord,
    FieldError,
    FileStat,
    FileStatus,
    RowRecord,
    RuleSettings,
    RunResult,
    ValidationBatch,
    ValidationResult,
)
from crm_validator.models.config_models import merge_validation_config


def test_field_error_create_trims_and_defaults():
    err = FieldError.create("Campo", "Campo obrigatório.", None, "   ")
    assert err.remediation == "Campo obrigatório."
    assert err.current_value == "(vazio)"
    assert FieldError.create("Campo", "m", "r", " x ").current_value == "x"


def test_row_record_first_skips_blanks():
    rec = RowRecord(2, {"a": " ", "b": " valor "})
    assert rec.first("a", "b") == "valor"
    assert rec.get("zz") == ""


def test_validation_result_to_dict_camel_case():
    result = ValidationResult(row_index=4, amounts={"valorExitoCc": "10"}, record={"a": "1"})
    data = result.to_dict()
    assert data["rowIndex"] == 4
    assert data["valid"] is True
    assert data["valorExitoCc"] == "10"
    assert data["record"] == {"a": "1"}
    json.dumps(data)


def test_batch_counts():
    bad = ValidationResult(row_index=3, errors=(FieldError.create("f", "m", "r", ""),))
    batch = ValidationBatch(results=(ValidationResult(row_index=2), bad))
    assert batch.total == 2
    assert batch.invalid_count == 1


def test_merge_validation_config_never_mutates_defaults():
    merged = merge_validation_config({"cadastro_lead": {"email": 0, "desconhecido": True}, "outro": {}})
    assert merged["cadastro_lead"]["email"] is False
    assert "desconhecido" not in merged["cadastro_lead"]
    assert "outro" not in merged
    assert DEFAULT_VALIDATION_CONFIG["cadastro_lead"]["email"] is True
    assert merge_validation_config("lixo") == merge_validation_config(None)


def test_rule_settings_from_mapping():
    settings = RuleSettings.from_mapping({"document_hosts": ["drive.example.com"]})
    assert settings.document_hosts == ("drive.example.com",)
    assert settings.current_email_domain == "bismarchipires.com.br"
    assert RuleSettings.from_mapping(None) == RuleSettings()


def test_error_record_json_line_keys():
    rec = ErrorRecord.create("a.xlsx", "", 5, "ROW_PROCESSING_ERROR", "boom")
    data = json.loads(rec.to_json_line())
    assert set(data) == {"timestamp", "file", "sheet", "row", "error_type", "message"}
    assert data["timestamp"].endswith("Z")


def test_run_result_aggregates():
    t = datetime(2025, 1, 1, tzinfo=UTC)
    stats = [
        FileStat("a.xlsx", FileStatus.SUCCESS, 3, 0, 1, 0, 0.1),
        FileStat("b.csv", FileStatus.INVALID_ROWS, 4, 2, 0, 1, 0.1),
        FileStat("c.json", FileStatus.FAILED, 0, 0, 0, 0, 0.0, error="bad"),
    ]
    result = RunResult(t, t, 0.2, stats)
    assert result.total_files == 3
    assert result.failed_files == 1
    assert result.total_rows == 7
    assert result.invalid_rows == 2
    assert result.valid_rows == 5
    assert result.skipped_rows == 1
    assert result.failed_rows == 1
