from __future__ import annotations

import re
from dataclasses import dataclass

from ..models.row_data import RowRecord
from ..sheet.headers import fold_text

"""Stage & funnel classification.

Reads the pipeline stage of a record, decides whether the row is dropped
(non-pipeline buckets such as initial contacts or discarded leads) and infers
the funnel when the export has no explicit "funil" column.

The funnel keyword heuristic is best-effort: unseen stage names default to the
sales funnel.
"""

__all__ = [
    "EXCLUDED_STAGES",
    "ONBOARDING_FUNNEL",
    "SALES_FUNNEL",
    "StageInfo",
    "classify",
    "is_excluded_stage",
    "is_tracked_funnel",
]

SALES_FUNNEL = "Funil de vendas"
ONBOARDING_FUNNEL = "Inclusão no fluxo de faturamento"

_EXCLUDED_STAGE_NAMES = (
    "Contato Inicial",
    "Contato feito",
    "Contato Trimestral",
    "Descartados",
    "Mensagem Enviada",
    "Suspenso",
    "Lead Quente",
    "Contato Mensal",
    "Lead Capturado",
    "Reunião Realizada",
    "Contatos",
    "Novos Contatos",
    "Execução do Serviço",
)
EXCLUDED_STAGES = frozenset(fold_text(s) for s in _EXCLUDED_STAGE_NAMES)

_ONBOARDING_KEYWORDS = re.compile(
    r"cadastro de novo cliente|inclusao no fluxo|boas-vindas|aguardando cadastro|kick-off|kickoff"
)


@dataclass(frozen=True)
class StageInfo:
    stage_name: str  # "" when the row has no stage
    funnel: str  # "" when neither funil nor stage is known
    excluded: bool


def is_excluded_stage(stage_name: str) -> bool:
    return bool(stage_name) and fold_text(stage_name) in EXCLUDED_STAGES


def infer_funnel(stage_name: str) -> str:
    if not stage_name:
        return ""
    if _ONBOARDING_KEYWORDS.search(fold_text(stage_name)):
        return ONBOARDING_FUNNEL
    return SALES_FUNNEL


def is_tracked_funnel(funnel: str) -> bool:
    """Only the sales funnel is validated."""
    return "vendas" in fold_text(funnel)


def classify(record: RowRecord) -> StageInfo:
    stage_name = record.first("stage_name", "stage")
    if is_excluded_stage(stage_name):
        return StageInfo(stage_name=stage_name, funnel="", excluded=True)
    funnel = record.first("funil") or infer_funnel(stage_name)
    return StageInfo(stage_name=stage_name, funnel=funnel, excluded=False)
