from __future__ import annotations

import csv
import json
import os
from pathlib import Path

from crm_validator.cli import main as cli_main


def _write_csv(path: Path, sheet: list[list[object]]) -> None:
    with path.open("w", encoding="utf-8", newline="") as f:
        csv.writer(f).writerows(sheet)


def test_cli_no_files_success(write_config, temp_workdir: Path, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY files=0/0 rows=0 valid=0 invalid=0" in out
    assert "WARN No supported files" in out


def test_cli_directory_missing(write_config, temp_workdir: Path, capsys):
    text = write_config.read_text(encoding="utf-8").replace("./data", "./missing_dir")
    write_config.write_text(text, encoding="utf-8")
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR directory not found:" in out


def test_cli_config_missing(temp_workdir: Path, capsys):
    code = cli_main([])
    assert code == 1
    assert "ERROR config: config file not found" in capsys.readouterr().out


def test_cli_all_valid(write_config, temp_workdir: Path, capsys, make_sheet, lead_row):
    _write_csv(temp_workdir / "data" / "leads.csv", make_sheet(lead_row(), lead_row(Stage="Descartados")))
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY files=1/1 rows=1 valid=1 invalid=0 skipped=1 failed_rows=0" in out
    result = json.loads((temp_workdir / "out" / "leads.results.json").read_text(encoding="utf-8"))
    assert result["total"] == 1
    assert result["comErros"] == 0


def test_cli_invalid_rows_partial_exit(write_config, temp_workdir: Path, capsys, make_sheet, lead_row):
    _write_csv(temp_workdir / "data" / "leads.csv", make_sheet(lead_row(), lead_row(Solicitante="")))
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 2
    assert "invalid=1" in out


def test_cli_config_flag_and_env(temp_workdir: Path, capsys, monkeypatch):
    cfg = temp_workdir / "alt.yml"
    cfg.write_text("source_directory: ./data\n", encoding="utf-8")
    assert cli_main(["--config", str(cfg)]) == 0
    monkeypatch.setenv("CRM_VALIDATOR_CONFIG", str(cfg))
    assert cli_main([]) == 0


def test_cli_env_file_sets_config_path(temp_workdir: Path, capsys):
    (temp_workdir / "alt.yml").write_text("source_directory: ./data\n", encoding="utf-8")
    (temp_workdir / ".env").write_text("CRM_VALIDATOR_CONFIG=alt.yml\n", encoding="utf-8")
    try:
        assert cli_main([]) == 0
    finally:
        os.environ.pop("CRM_VALIDATOR_CONFIG", None)
    assert "SUMMARY files=0/0" in capsys.readouterr().out
