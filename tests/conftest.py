# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path
from typing import Any, Callable

import pytest

from crm_validator.logging.init import reset_logging

# Header row of a minimal lead-intake export
LEAD_HEADERS = [
    "Stage",
    "Funil",
    "Solicitante",
    "E-mail",
    "Cadastrado por",
    "Haverá Due Diligence?",
    "Local da Reunião",
    "Tipo de Lead",
    "Razão Social",
    "CNPJ",
    "Status",
    "Created At",
    "Updated At",
]

VALID_LEAD = {
    "Stage": "Reunião agendada",
    "Funil": "Funil de vendas",
    "Solicitante": "Gustavo Bismarchi",
    "E-mail": "gustavo@bismarchipires.com.br",
    "Cadastrado por": "gustavo@bismarchipires.com.br",
    "Haverá Due Diligence?": "Não",
    "Local da Reunião": "Escritório SP",
    "Tipo de Lead": "Lead Ativa",
    "Razão Social": "ALFA SOLUÇÕES LTDA",
    "CNPJ": "12.345.678/0001-90",
    "Status": "Em andamento",
    "Created At": "01/07/2025",
    "Updated At": "20/07/2025 10:00",
}


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("CRM_VALIDATOR_CONFIG", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
header_row: 1
output_directory: ./out
timezone: UTC
validation_config:
  cadastro_lead:
    areas_analise: false
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "validate.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def lead_row() -> Callable[..., dict[str, Any]]:
    """Valid lead-intake row (header -> value); keyword args replace cells."""
    def _make(**changes: Any) -> dict[str, Any]:
        row = dict(VALID_LEAD)
        row.update(changes)
        return row
    return _make


@pytest.fixture()
def make_sheet() -> Callable[..., list[list[Any]]]:
    """Raw matrix (header first) from row dicts; headers default to the union in order."""
    def _make(*rows: dict[str, Any], headers: list[str] | None = None) -> list[list[Any]]:
        cols = list(headers or LEAD_HEADERS)
        for row in rows:
            for key in row:
                if key not in cols:
                    cols.append(key)
        return [cols] + [[row.get(c, "") for c in cols] for row in rows]
    return _make


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()
