from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from ..models.config_models import RuleSettings, merge_validation_config
from ..models.field_error import FieldError
from ..models.row_data import RowRecord
from ..sheet.headers import fold_text
from .classifier import StageInfo, is_tracked_funnel

"""Stage-conditional validation rules.

Rules are grouped in scopes. Lead intake (cadastro_lead) applies to every row
of the sales funnel; the other scopes apply only when the stage name matches
(substring match on the folded stage name). Scopes run in declaration order and
their errors are concatenated.

Every check is independent: a failing check appends exactly one FieldError and
never stops its siblings. Each check can be switched off through the enable-map
(scope -> field -> bool); a disabled check contributes nothing.
"""

__all__ = [
    "SCOPES",
    "Scope",
    "applicable_scopes",
    "has_company_entry",
    "is_document_link",
    "is_known_payment_type",
    "is_known_requester",
    "is_valid_amount",
    "is_valid_dmy_date",
    "is_valid_email",
    "is_valid_phone",
    "is_valid_split",
    "resolve_lead_type",
    "uses_deprecated_domain",
    "validate_record",
]

REGEX_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
REGEX_DATE_DMY = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
REGEX_AMOUNT = re.compile(r"^\d+(\.\d+)?$")
REGEX_PERCENT = re.compile(r"^\d+%$")
REGEX_SIMPLE_PROPOSAL = re.compile(r"^N/A\s*[-–—]?\s*Proposta simples por (telefone|whatsapp)", re.IGNORECASE)

REQUIRED = "Campo obrigatório."
PLACEHOLDER_TBD = "a definir"

AMOUNT_FIELDS: tuple[tuple[str, str], ...] = (
    ("valor_mensal_fixo_cc", "Mensal – Fixo Valor R$ [CC]"),
    ("valor_mensal_preco_fechado_cc", "Mensal - Preço Fechado Parcelado - Valor R$ [CC]"),
    ("valor_mensal_escalonado_cc", "Mensal – Escalonado - Valor R$ [CC]"),
    ("valor_mensal_variavel_cc", "Mensal – Variável - Valor R$ [CC]"),
    ("valor_mensal_condicionado_cc", "Mensal – Condicionado - Valor R$ [CC]"),
    ("valor_spot_cc", "SPOT - Valor R$ [CC]"),
    ("valor_spot_manutencao_cc", "SPOT com Manutenção - Valor R$ [CC]"),
    ("valor_spot_parcelado_cc", "SPOT – Parcelado - Valor R$ [CC]"),
    ("valor_spot_parcelado_manutencao_cc", "SPOT - Parcelado com manutenção - Valor R$ [CC]"),
    ("valor_spot_condicionado_cc", "SPOT – Condicionado - Valor R$ [CC]"),
    ("valor_exito_cc", "Êxito - Valor R$ [CC]"),
)

SPLIT_FIELDS: tuple[tuple[str, str], ...] = (
    ("rateio_reestruturacao_cc", "RATEIO - PORCENTAGEM % (Reestruturação e Insolvência) - [CC]"),
    ("rateio_civel_cc", "RATEIO - PORCENTAGEM % (Cível) - [CC]"),
    ("rateio_trabalhista_cc", "RATEIO - PORCENTAGEM % (Trabalhista) - [CC]"),
    ("rateio_tributario_cc", "RATEIO - PORCENTAGEM % (Tributário) - [CC]"),
    ("rateio_contratos_cc", "RATEIO - PORCENTAGEM % (Contratos / Societário) - [CC]"),
    ("rateio_add_cc", "RATEIO - PORCENTAGEM % (ADD) - [CC]"),
)

_TAX_OPTIONS = ("valor liquido de tributos", "bruto", "englobando", "sem tributos")


class _Sink:
    """Collects the errors of one scope, honouring the enable-map."""

    def __init__(self, scope: str, enabled: Mapping[str, Mapping[str, bool]]) -> None:
        self.scope = scope
        self.enabled = enabled
        self.errors: list[FieldError] = []

    def add(self, key: str, label: str, message: str, remediation: str, value: Any) -> None:
        toggles = self.enabled.get(self.scope, {})
        if toggles.get(key) is False:
            return
        self.errors.append(FieldError.create(label, message, remediation, value))


# --- field predicates ---

def is_valid_email(value: str) -> bool:
    return bool(REGEX_EMAIL.match(value.strip()))


def uses_deprecated_domain(value: str, settings: RuleSettings) -> bool:
    lower = value.strip().lower()
    return any(lower.endswith("@" + d.lower()) for d in settings.deprecated_email_domains)


def is_full_name(value: str) -> bool:
    return len(value.split()) >= 2


def is_valid_phone(value: str) -> bool:
    digits = re.sub(r"\D", "", value)
    return 10 <= len(digits) <= 11


def is_document_link(value: str, settings: RuleSettings) -> bool:
    url = value.strip().lower()
    if not url.startswith("https://"):
        return False
    return any(host.lower() in url for host in settings.document_hosts)


def is_valid_dmy_date(value: str) -> bool:
    m = REGEX_DATE_DMY.match(value.strip())
    if not m:
        return False
    day, month, year = (int(g) for g in m.groups())
    return 1 <= day <= 31 and 1 <= month <= 12 and 2000 <= year <= 2100


def is_valid_amount(value: str) -> bool:
    text = value.strip()
    return text == "" or text == "0" or bool(REGEX_AMOUNT.match(text))


def is_valid_split(value: str) -> bool:
    text = value.strip()
    return text == "" or bool(REGEX_PERCENT.match(text))


def is_known_requester(value: str, settings: RuleSettings) -> bool:
    folded = fold_text(value)
    return any(fold_text(name) == folded for name in settings.requester_names)


def is_known_payment_type(value: str, settings: RuleSettings) -> bool:
    folded = fold_text(value)
    for option in settings.payment_types:
        opt = fold_text(option)
        if opt and (opt in folded or folded in opt):
            return True
    return False


def _is_tbd(value: str) -> bool:
    return fold_text(value) == PLACEHOLDER_TBD


def _company_entries(raw: str) -> list[Any]:
    """Entries of the structured company list (JSON array, or comma-joined objects)."""
    text = raw.strip()
    if not text:
        return []
    if text.startswith("{"):
        text = f"[{text}]"
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return []
    return parsed if isinstance(parsed, list) else []


def has_company_entry(record: RowRecord) -> bool:
    """True when razao_social_cnpj holds at least one entry with both name and tax id."""
    for entry in _company_entries(record.get("razao_social_cnpj")):
        if not isinstance(entry, dict):
            continue
        name = str(entry.get("razao_social") or entry.get("razao_social_cnpj") or "").strip()
        tax_id = str(entry.get("cnpj") or entry.get("cnpj_cpf") or "").strip()
        if name and tax_id:
            return True
    return False


def resolve_lead_type(record: RowRecord) -> str:
    value = record.first("tipo_de_lead", "tipo_lead", "tipo_do_lead")
    if value:
        return value
    for key in record.keys():
        if "tipo" in key and "lead" in key and record.get(key).strip():
            return record.get(key).strip()
    return ""


def _check_email(
    sink: _Sink, key: str, label: str, value: str, settings: RuleSettings, required_hint: str, invalid_hint: str
) -> None:
    domain = settings.current_email_domain
    if not value:
        sink.add(key, label, REQUIRED, required_hint, value)
    elif not is_valid_email(value):
        sink.add(key, label, "E-mail inválido.", invalid_hint, value)
    elif uses_deprecated_domain(value, settings):
        old = ", ".join("@" + d for d in settings.deprecated_email_domains)
        sink.add(
            key, label, f"Use o domínio @{domain}.",
            f"O correto a ser preenchido é com o domínio @{domain} (não {old}).", value,
        )


def _check_link(sink: _Sink, key: str, label: str, value: str, settings: RuleSettings, required_msg: str) -> None:
    if not value:
        sink.add(
            key, label, required_msg,
            "Link ou caminho para a pasta compartilhada (SharePoint, VIOS, etc.).", value,
        )
    elif not is_document_link(value, settings):
        sink.add(
            key, label, "Link deve ser diretório oficial (SharePoint, VIOS).",
            "Use link que comece com https:// e contenha sharepoint ou vios.", value,
        )


# --- scopes ---

def check_lead_intake(record: RowRecord, sink: _Sink, settings: RuleSettings) -> None:
    requester = record.first("solicitante")
    if not requester:
        sink.add("solicitante", "Solicitante", REQUIRED, "Use um dos nomes cadastrados.", requester)
    elif not is_known_requester(requester, settings):
        sink.add(
            "solicitante", "Solicitante", "Nome incorreto. Deve ser um dos colaboradores cadastrados.",
            "Preencha exatamente como: " + ", ".join(settings.requester_names), requester,
        )

    _check_email(
        sink, "email", "E-mail do Solicitante", record.first("email"), settings,
        "E-mail corporativo válido.", "Use e-mail corporativo válido.",
    )
    _check_email(
        sink, "cadastrado_por", "Cadastro realizado por (e-mail)", record.first("cadastrado_por"), settings,
        "E-mail do colaborador.", "Use e-mail corporativo válido.",
    )

    due = record.first("due_diligence")
    if not due:
        sink.add("due_diligence", "Haverá Due Diligence?", REQUIRED, 'Selecione "Sim" ou "Não".', due)
    if not record.first("local_reuniao"):
        sink.add("local_reuniao", "Local da Reunião", REQUIRED, 'Endereço, link ou "A definir".', "")

    lead_type = resolve_lead_type(record)
    if not lead_type:
        sink.add(
            "tipo_de_lead", "Tipo de Lead", REQUIRED,
            "Indicação | Lead Ativa | Lead Digital | Lead Passiva", lead_type,
        )

    if not has_company_entry(record):
        company = record.first("razao_social")
        tax_id = record.first("cnpj", "cnpj_cpf")
        if not company:
            sink.add("razao_social", "Razão Social / Nome Completo", REQUIRED, "Para PJ use CAIXA ALTA.", company)
        if not tax_id:
            sink.add("cnpj", "CNPJ/CPF", REQUIRED, "Informe CNPJ ou CPF.", tax_id)

    areas = record.first("areas_analise", "areas_envolvidas")
    if not areas:
        sink.add("areas_analise", "Áreas Envolvidas", REQUIRED, "Selecione ao menos uma área.", areas)
    elif _is_tbd(areas):
        sink.add("areas_analise", "Áreas Envolvidas", "Selecione as áreas jurídicas.", "Ex.: Cível; Trabalhista; Tributário", areas)

    if fold_text(due) == "sim":
        deadline = record.first("prazo_reuniao_due")
        if not deadline or _is_tbd(deadline):
            sink.add(
                "prazo_reuniao_due", "Prazo de Entrega da Due", "Obrigatório quando Haverá Due Diligence = Sim.",
                "Informe a data de entrega. Formato DD/MM/AAAA.", deadline,
            )
        due_time = record.first("horario_due")
        if not due_time or _is_tbd(due_time):
            sink.add(
                "horario_due", "Horário de Entrega da Due", "Obrigatório quando Haverá Due Diligence = Sim.",
                "Informe o horário. Formato 24h HH:MM.", due_time,
            )

    if fold_text(lead_type) == "indicacao":
        if not record.first("indicacao"):
            sink.add(
                "indicacao", "Indicação", "Obrigatório quando Tipo de Lead = Indicação.",
                "Fundo | Consultor | Cliente | etc.", "",
            )
        if not record.first("nome_indicacao"):
            sink.add(
                "nome_indicacao", "Nome da Indicação", "Obrigatório quando Tipo de Lead = Indicação.",
                "Nome de quem indicou.", "",
            )


def check_proposal_drafting(record: RowRecord, sink: _Sink, settings: RuleSettings) -> None:
    company = record.first("razao_social_cp", "razao_social")
    if not company:
        sink.add(
            "razao_social_cp", "Razão Social [CP]", REQUIRED,
            "Nome jurídico em MAIÚSCULO. Ex.: ALFA SOLUÇÕES LTDA", company,
        )
    tax_id = record.first("cnpj_cp", "cnpj")
    if not tax_id:
        sink.add("cnpj_cp", "CNPJ [CP]", REQUIRED, "CNPJ ou CPF no formato da Receita Federal.", tax_id)

    qualification = record.first("qualificacao_completa")
    if not qualification:
        sink.add(
            "qualificacao_completa", "Qualificação completa [CP]", REQUIRED,
            'Endereço completo, CEP e e-mail corporativo. Ou "N/A".', qualification,
        )
    elif qualification.lower() != "n/a" and len(qualification) < 10:
        sink.add(
            "qualificacao_completa", "Qualificação completa [CP]", "Dados insuficientes.",
            'Preencha endereço, CEP e e-mail ou use "N/A".', qualification,
        )

    areas = record.first("areas_objeto_contrato_cp", "areas_cp")
    if not areas or _is_tbd(areas):
        sink.add(
            "areas_objeto_contrato_cp", "Áreas Objeto do contrato [CP]", REQUIRED,
            "Selecione ao menos uma área (Cível, Tributário, etc.).", areas,
        )

    performed_due = record.first("realizou_due_diligence")
    if fold_text(performed_due) not in ("sim", "nao"):
        sink.add(
            "realizou_due_diligence", "Realizou Due Diligence? [CP]", REQUIRED,
            'Selecione "Sim" ou "Não".', performed_due,
        )

    manager = record.first("gestor_contrato_cp", "gestor_contrato")
    if not manager:
        sink.add(
            "gestor_contrato_cp", "Gestor do Contrato [CP]", REQUIRED,
            "Nome completo do colaborador responsável.", manager,
        )

    contact_name = record.first("nome_ponto_focal", "nome_do_ponto_focal")
    if not contact_name:
        sink.add(
            "nome_ponto_focal", "Nome do ponto focal / Comercial [CP]", REQUIRED,
            "Nome completo. Ex.: Maria Costa Silva", contact_name,
        )
    elif not is_full_name(contact_name):
        sink.add(
            "nome_ponto_focal", "Nome do ponto focal / Comercial [CP]",
            "Informe nome completo (nome e sobrenome).",
            "Ex.: Maria Costa Silva. Não use apenas o primeiro nome.", contact_name,
        )

    _check_email(
        sink, "email_ponto_focal", "E-mail do ponto focal / Comercial [CP]",
        record.first("email_ponto_focal", "email_do_ponto_focal"), settings,
        "E-mail corporativo válido.", "Use e-mail corporativo ativo.",
    )

    phone = record.first("telefone_ponto_focal", "telefone_do_ponto_focal")
    if not phone:
        sink.add(
            "telefone_ponto_focal", "Telefone do ponto focal / Comercial [CP]", REQUIRED,
            "(DD) 9XXXX-XXXX ou (DD) XXXX-XXXX", phone,
        )
    elif not is_valid_phone(phone):
        sink.add(
            "telefone_ponto_focal", "Telefone do ponto focal / Comercial [CP]",
            "Telefone inválido ou incompleto.",
            "Inclua DDD e número. Ex.: (11) 91234-5678 ou (11) 1234-5678", phone,
        )

    scout = record.first("captador_cp", "captador")
    if not scout:
        sink.add(
            "captador_cp", "Captador [CP]", REQUIRED,
            "Nome ou identificação do colaborador que captou o lead.", scout,
        )

    taxation = record.first("tributacao_cp", "tributacao")
    if not any(opt in fold_text(taxation) for opt in _TAX_OPTIONS):
        sink.add(
            "tributacao_cp", "Tributação [CP]", REQUIRED,
            "Líquido/Englobando Tributos ou Bruto/Sem Tributos", taxation,
        )

    delivery = record.first("prazo_entrega_cp", "prazo_para_entrega_cp", "prazo_para_entrega")
    if not delivery:
        sink.add(
            "prazo_entrega_cp", "Prazo para entrega [CP]", REQUIRED,
            "Formato DD/MM/AAAA. Mínimo 2 dias úteis.", delivery,
        )
    elif not is_valid_dmy_date(delivery) and "excecao" not in fold_text(delivery):
        sink.add(
            "prazo_entrega_cp", "Prazo para entrega [CP]", "Data inválida.",
            "Formato DD/MM/AAAA. Exceção: informar motivo.", delivery,
        )

    first_due = record.first("data_primeiro_vencimento_cp", "data_do_primeiro_vencimento_cp")
    if not first_due:
        sink.add(
            "data_primeiro_vencimento_cp", "Data do primeiro vencimento [CP]", REQUIRED,
            "Formato DD/MM/AAAA.", first_due,
        )
    elif not is_valid_dmy_date(first_due):
        sink.add(
            "data_primeiro_vencimento_cp", "Data do primeiro vencimento [CP]", "Data inválida.",
            "Formato DD/MM/AAAA. Ex.: 15/07/2025", first_due,
        )

    if not record.first("informacoes_adicionais_cp", "informacoes_adicionais"):
        sink.add(
            "informacoes_adicionais_cp", "Informações adicionais [CP]", REQUIRED,
            'Informe detalhes ou "N/A" se não houver.', "",
        )
    if not record.first("demais_razoes_sociais_cp", "demais_razoes_sociais"):
        sink.add(
            "demais_razoes_sociais_cp", "Demais Razões Sociais [CP]", REQUIRED,
            'Liste as demais razões com ; ou "N/A" se houver apenas uma.', "",
        )

    _check_link(
        sink, "link_da_proposta", "Link da Proposta", record.first("link_da_proposta", "link_proposta"),
        settings, REQUIRED,
    )


def check_proposal_sent(record: RowRecord, sink: _Sink, settings: RuleSettings) -> None:
    link = record.first("link_da_proposta", "link_proposta")
    if link and REGEX_SIMPLE_PROPOSAL.match(link):
        return
    _check_link(
        sink, "link_da_proposta", "Link da Proposta", link, settings,
        "Campo obrigatório na etapa Proposta enviada.",
    )


def check_contract_drafting(record: RowRecord, sink: _Sink, settings: RuleSettings) -> None:
    options = "Mensal, Spot à vista, Spot parcelado, Escalonado, Variável, Alternativo, Só êxito"
    payment = record.first("tipo_pagamento_cc", "tipo_de_pagamento_cc")
    if not payment:
        sink.add("tipo_pagamento_cc", "Tipo de pagamento [CC]", REQUIRED, options, payment)
    elif not is_known_payment_type(payment, settings):
        sink.add("tipo_pagamento_cc", "Tipo de pagamento [CC]", "Opção inválida.", "Selecione: " + options, payment)

    scope_text = record.first("objeto_contrato_cc", "objeto_do_contrato_cc", "escopo_contratual_cadastro")
    if not scope_text:
        sink.add(
            "objeto_contrato_cc", "Objeto do Contrato [CC]", REQUIRED,
            "Descrever de forma clara e completa o objeto do contrato (serviços, escopo, detalhes).", scope_text,
        )

    for key, label in AMOUNT_FIELDS:
        value = record.get(key)
        if not is_valid_amount(value):
            sink.add("valores_cc", label, "Apenas números.", "Ex.: 1000 ou 1000.00. Se não se aplicar: 0 ou vazio.", value)

    for key, label in SPLIT_FIELDS:
        value = record.get(key)
        if not is_valid_split(value):
            sink.add("rateio_cc", label, "Formato inválido.", "Apenas número + %. Ex.: 50% ou 0%", value)

    deadline = record.first("prazo_contrato_cc", "prazo_confecao_contrato_cc", "prazo_entrega_contrato")
    if not deadline:
        sink.add(
            "prazo_contrato_cc", "Prazo para Confecção do Contrato [CC]", REQUIRED,
            "Formato DD/MM/AAAA. Ex.: 25/07/2025", deadline,
        )
    elif not is_valid_dmy_date(deadline):
        sink.add(
            "prazo_contrato_cc", "Prazo para Confecção do Contrato [CC]", "Data inválida.",
            "Formato DD/MM/AAAA. Ex.: 25/07/2025", deadline,
        )

    _check_link(
        sink, "link_do_contrato", "Link do Contrato", record.first("link_do_contrato", "link_contrato"),
        settings, REQUIRED,
    )


def check_contract_link(record: RowRecord, sink: _Sink, settings: RuleSettings) -> None:
    _check_link(
        sink, "link_do_contrato", "Link do Contrato", record.first("link_do_contrato", "link_contrato"),
        settings, "Campo obrigatório a partir da etapa Contrato Elaborado.",
    )


# --- scope selection ---

def _is_proposal_drafting(stage: str) -> bool:
    return "confec" in stage and "proposta" in stage


def _is_proposal_sent(stage: str) -> bool:
    return "proposta" in stage and "enviada" in stage and not _is_proposal_drafting(stage)


def _is_contract_drafting(stage: str) -> bool:
    return "confec" in stage and "contrato" in stage


def _is_contract_drafted(stage: str) -> bool:
    return "contrato" in stage and ("elaborado" in stage or "assinado" in stage)


@dataclass(frozen=True)
class Scope:
    name: str
    config_scope: str  # enable-map section holding this scope's toggles
    applies: Callable[[str], bool]  # folded stage name -> bool
    check: Callable[[RowRecord, _Sink, RuleSettings], None]


SCOPES: tuple[Scope, ...] = (
    Scope("cadastro_lead", "cadastro_lead", lambda stage: True, check_lead_intake),
    Scope("confecao_proposta", "confecao_proposta", _is_proposal_drafting, check_proposal_drafting),
    Scope("proposta_enviada", "proposta_enviada", _is_proposal_sent, check_proposal_sent),
    Scope("confecao_contrato", "confecao_contrato", _is_contract_drafting, check_contract_drafting),
    Scope("contrato_elaborado", "confecao_contrato", _is_contract_drafted, check_contract_link),
)


def applicable_scopes(stage: StageInfo) -> list[Scope]:
    """Scopes that run for a classified row (none outside the sales funnel)."""
    if not is_tracked_funnel(stage.funnel):
        return []
    folded = fold_text(stage.stage_name)
    return [s for s in SCOPES if s.applies(folded)]


def validate_record(
    record: RowRecord,
    stage: StageInfo,
    settings: RuleSettings | None = None,
    validation_config: Any = None,
) -> list[FieldError]:
    """Run every applicable scope and return the concatenated errors."""
    settings = settings or RuleSettings()
    enabled = merge_validation_config(validation_config)
    errors: list[FieldError] = []
    for scope in applicable_scopes(stage):
        sink = _Sink(scope.config_scope, enabled)
        scope.check(record, sink, settings)
        errors.extend(sink.errors)
    return errors
