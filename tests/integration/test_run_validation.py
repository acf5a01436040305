from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pandas as pd

from crm_validator.config.loader import load_config
from crm_validator.logging.error_log import ErrorLogBuffer
from crm_validator.models.processing_result import FileStatus
from crm_validator.services.orchestrator import run_all

NOW = datetime(2025, 7, 25, 12, 0, tzinfo=UTC)

CONTRACT_COLUMNS = {
    "Tipo de pagamento [CC]": "Mensal",
    "Objeto do Contrato [CC]": "Assessoria tributária",
    "Mensal Fixo Valor R$ [CC]": "R$ 100",
    "Prazo Contrato [CC]": datetime(2025, 8, 1),
    "Link do Contrato": "https://bpplaw2.sharepoint.com/contratos/alfa",
}


def _write_xlsx(path: Path, sheet: list[list[object]]) -> None:
    with pd.ExcelWriter(path) as writer:
        pd.DataFrame(sheet).to_excel(writer, sheet_name="Leads", header=False, index=False)


def test_run_mixed_directory(write_config: Path, temp_workdir: Path, make_sheet, lead_row):
    data = temp_workdir / "data"
    contract_row = lead_row(Stage="Confecção de Contrato", **CONTRACT_COLUMNS)
    _write_xlsx(data / "a_leads.xlsx", make_sheet(lead_row(), contract_row, lead_row(Stage="Suspenso")))
    (data / "b_leads.json").write_text(
        json.dumps({"values": make_sheet(lead_row(**{"Áreas Envolvidas": ["Cível", "Tributário"]}))}),
        encoding="utf-8",
    )
    (data / "c_broken.xlsx").write_bytes(b"not a workbook")
    (data / "ignored.txt").write_text("x", encoding="utf-8")

    cfg = load_config(write_config)
    log = ErrorLogBuffer()
    result = run_all(cfg, log, now=NOW)

    by_name = {s.file_name: s for s in result.file_stats}
    assert list(by_name) == ["a_leads.xlsx", "b_leads.json", "c_broken.xlsx"]
    assert by_name["a_leads.xlsx"].status is FileStatus.INVALID_ROWS
    assert by_name["a_leads.xlsx"].total_rows == 2
    assert by_name["a_leads.xlsx"].invalid_rows == 1
    assert by_name["a_leads.xlsx"].skipped_rows == 1
    assert by_name["b_leads.json"].status is FileStatus.SUCCESS
    assert by_name["c_broken.xlsx"].status is FileStatus.FAILED
    assert result.failed_files == 1

    out = json.loads((temp_workdir / "out" / "a_leads.results.json").read_text(encoding="utf-8"))
    contract = out["results"][1]
    assert contract["rowIndex"] == 3
    assert [e["field"] for e in contract["errors"]] == ["Mensal – Fixo Valor R$ [CC]"]
    assert contract["valorMensalFixoCc"] == "R$ 100"
    assert contract["record"]["prazo_contrato_cc"] == "01/08/2025"
    assert out["results"][0]["daysSinceReference"] == 5

    json_out = json.loads((temp_workdir / "out" / "b_leads.results.json").read_text(encoding="utf-8"))
    assert json_out["results"][0]["areas"] == "Cível, Tributário"

    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    (line,) = logs[0].read_text(encoding="utf-8").splitlines()
    entry = json.loads(line)
    assert entry["file"] == "c_broken.xlsx"
    assert entry["row"] == -1
    assert entry["error_type"] == "FILE_READ_ERROR"


def test_run_without_output_directory(temp_workdir: Path, make_sheet, lead_row):
    cfg_path = temp_workdir / "config" / "validate.yml"
    cfg_path.write_text("source_directory: ./data\n", encoding="utf-8")
    _write_xlsx(temp_workdir / "data" / "leads.xlsx", make_sheet(lead_row()))
    result = run_all(load_config(cfg_path), now=NOW)
    assert result.total_rows == 1
    assert result.valid_rows == 1
    assert result.file_stats[0].output_path is None
    assert not (temp_workdir / "out").exists()
    assert list((temp_workdir / "logs").iterdir()) == []


def test_header_row_and_overrides_from_config(temp_workdir: Path, make_sheet, lead_row):
    cfg_path = temp_workdir / "config" / "validate.yml"
    cfg_path.write_text(
        "source_directory: ./data\n"
        "header_row: 2\n"
        "column_overrides:\n"
        "  Quem pediu: solicitante\n",
        encoding="utf-8",
    )
    sheet = make_sheet(lead_row())
    sheet[0] = ["Quem pediu" if h == "Solicitante" else h for h in sheet[0]]
    _write_xlsx(temp_workdir / "data" / "leads.xlsx", [["Exportação CRM"]] + sheet)
    result = run_all(load_config(cfg_path), now=NOW)
    assert result.total_rows == 1
    assert result.invalid_rows == 0
