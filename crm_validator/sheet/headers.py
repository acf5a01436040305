from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

"""Header normalization and alias resolution.

Column titles differ between CRM exports, languages and manual edits. Each title
is reduced to an ASCII token (lowercase, no diacritics, whitespace -> "_", only
[a-z0-9_]) and the token is resolved to a canonical key: caller overrides first,
then ALIAS_TABLE, then the token itself, so unknown columns stay addressable by
their normalized name.
"""

__all__ = [
    "ALIAS_TABLE",
    "build_header_keys",
    "describe_mapping",
    "fold_text",
    "normalize_header",
    "normalize_overrides",
    "resolve_key",
]

_WHITESPACE = re.compile(r"\s+")
_NON_TOKEN = re.compile(r"[^a-z0-9_]")


def _strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_header(raw: Any) -> str:
    """Canonical ASCII token for a raw header. Never fails, idempotent."""
    if not isinstance(raw, str) or not raw:
        return ""
    token = _strip_diacritics(raw.lower())
    token = _WHITESPACE.sub("_", token)
    return _NON_TOKEN.sub("", token)


def fold_text(raw: Any) -> str:
    """Lowercase, diacritic-free, single-spaced text for free-text matching."""
    if raw is None:
        return ""
    text = _strip_diacritics(str(raw).lower())
    return _WHITESPACE.sub(" ", text).strip()


_ALIASES: dict[str, str] = {
    # Identificação
    "stage_name": "stage_name",
    "stage": "stage_name",
    "nome_etapa": "stage_name",
    "nome_da_etapa": "stage_name",
    "stage_id": "stage_id",
    "etapa": "etapa",
    "etapa_id": "etapa",
    "funil": "funil",
    "nome": "nome",
    "lead": "nome_lead",
    "nome_lead": "nome_lead",
    "deal_id": "deal_id",
    "id_registro": "id_registro",
    "estado": "status",
    "status": "status",
    "situacao": "status",
    "status_da_negociacao": "status",
    "status_negociacao": "status",
    "motivo_de_perda": "motivo_perda",
    "motivo_perda": "motivo_perda",
    "motivo_perda_lost": "motivo_perda",
    # Cadastro do lead
    "solicitante": "solicitante",
    "email": "email",
    "email_solicitante": "email",
    "e_mail_do_solicitante": "email",
    "email_do_solicitante": "email",
    "cadastrado_por": "cadastrado_por",
    "cadastro_realizado_por": "cadastrado_por",
    "cadastro_realizado_por_email": "cadastrado_por",
    "due_diligence": "due_diligence",
    "havera_due_diligence": "due_diligence",
    "prazo_reuniao_due": "prazo_reuniao_due",
    "prazo_de_entrega_da_due": "prazo_reuniao_due",
    "prazo_entrega_data": "prazo_reuniao_due",
    "horario_due": "horario_due",
    "horario_de_entrega_da_due": "horario_due",
    "prazo_entrega_hora": "horario_due",
    "razao_social": "razao_social",
    "razao_social_nome_completo": "razao_social",
    "razao_social_completa": "razao_social",
    "cnpj": "cnpj",
    "cnpj_cpf": "cnpj",
    "razao_social_cnpj": "razao_social_cnpj",
    "areas_analise": "areas_analise",
    "local_reuniao": "local_reuniao",
    "local_da_reuniao": "local_reuniao",
    "data_reuniao": "data_reuniao",
    "data_da_reuniao": "data_reuniao",
    "horario_reuniao": "horario_reuniao",
    "horario_da_reuniao": "horario_reuniao",
    "tipo_de_lead": "tipo_de_lead",
    "tipo_lead": "tipo_de_lead",
    "tipo_do_lead": "tipo_de_lead",
    "indicacao": "indicacao",
    "nome_indicacao": "nome_indicacao",
    "nome_da_indicacao": "nome_indicacao",
    # Notificação
    "email_notificar": "email_notificar",
    "telefone_notificar": "telefone_notificar",
    "whatsapp": "telefone_notificar",
    "telefone": "telefone_notificar",
    "celular": "telefone_notificar",
    # Datas (SLA)
    "updated_at": "updated_at",
    "date_update": "updated_at",
    "ultima_atualizacao": "updated_at",
    "data_atualizacao": "updated_at",
    "data_de_atualizacao": "updated_at",
    "dataatualizacao": "updated_at",
    "last_updated": "updated_at",
    "created_at": "created_at",
    "date_create": "created_at",
    "data_criacao": "created_at",
    "data_de_criacao": "created_at",
    "datacriacao": "created_at",
    "data_criacao_do_registro": "created_at",
    "follow_up": "follow_up",
    "ultimo_followup": "follow_up",
    "ultimo_follow_up": "follow_up",
    "follow_up_anotacao": "follow_up_anotacao",
    # Confecção de proposta [CP]
    "nome_do_ponto_focal_comercial_cp": "nome_ponto_focal",
    "nome_do_ponto_focal": "nome_ponto_focal",
    "nome_ponto_focal": "nome_ponto_focal",
    "ponto_focal_comercial": "nome_ponto_focal",
    "email_do_ponto_focal_comercial_cp": "email_ponto_focal",
    "e_mail_do_ponto_focal_comercial_cp": "email_ponto_focal",
    "email_do_ponto_focal": "email_ponto_focal",
    "email_ponto_focal": "email_ponto_focal",
    "telefone_do_ponto_focal_comercial_cp": "telefone_ponto_focal",
    "telefone_do_ponto_focal": "telefone_ponto_focal",
    "telefone_ponto_focal": "telefone_ponto_focal",
    "link_da_proposta": "link_da_proposta",
    "link_proposta": "link_da_proposta",
    "link_do_contrato": "link_do_contrato",
    "link_contrato": "link_do_contrato",
    "razao_social_cp": "razao_social_cp",
    "razao_social_cp_cp": "razao_social_cp",
    "razao_social_financeiro": "razao_social_cp",
    "cnpj_cp": "cnpj_cp",
    "cnpj_cp_cp": "cnpj_cp",
    "cpf_cnpj_financeiro": "cnpj_cp",
    "qualificacao_completa": "qualificacao_completa",
    "qualificacao_completa_endereco_cep": "qualificacao_completa",
    "areas_objeto_do_contrato_cp": "areas_objeto_contrato_cp",
    "areas_objeto_contrato_cp": "areas_objeto_contrato_cp",
    "areas_objeto_contrato": "areas_objeto_contrato_cp",
    "areas_cp": "areas_objeto_contrato_cp",
    "realizou_due_diligence": "realizou_due_diligence",
    "realizou_due_diligence_cp": "realizou_due_diligence",
    "gestor_do_contrato_cp": "gestor_contrato_cp",
    "gestor_contrato_cp": "gestor_contrato_cp",
    "gestor_do_contrato": "gestor_contrato_cp",
    "gestor_contrato": "gestor_contrato_cp",
    "captador_cp": "captador_cp",
    "captador": "captador_cp",
    "tributacao_cp": "tributacao_cp",
    "tributacao": "tributacao_cp",
    "prazo_para_entrega_cp": "prazo_entrega_cp",
    "prazo_entrega_cp": "prazo_entrega_cp",
    "prazo_para_entrega": "prazo_entrega_cp",
    "data_do_primeiro_vencimento_cp": "data_primeiro_vencimento_cp",
    "data_primeiro_vencimento_cp": "data_primeiro_vencimento_cp",
    "data_do_primeiro_vencimento": "data_primeiro_vencimento_cp",
    "data_primeiro_vencimento": "data_primeiro_vencimento_cp",
    "informacoes_adicionais_cp": "informacoes_adicionais_cp",
    "informacoes_adicionais": "informacoes_adicionais_cp",
    "demais_razoes_sociais_cp": "demais_razoes_sociais_cp",
    "demais_razoes_sociais": "demais_razoes_sociais_cp",
    # Confecção de contrato [CC]
    "tipo_de_pagamento_cc": "tipo_pagamento_cc",
    "tipo_pagamento_cc": "tipo_pagamento_cc",
    "tipo_pagamento": "tipo_pagamento_cc",
    "objeto_do_contrato_cc": "objeto_contrato_cc",
    "objeto_contrato_cc": "objeto_contrato_cc",
    "escopo_contratual_cadastro": "objeto_contrato_cc",
    "mensal_fixo_valor_r_cc": "valor_mensal_fixo_cc",
    "mensal_fixo_valor_cc": "valor_mensal_fixo_cc",
    "valor_mensal_fixo_cc": "valor_mensal_fixo_cc",
    "mensal_fixo_financeiro": "valor_mensal_fixo_cc",
    "mensal_preco_fechado_parcelado_valor_r_cc": "valor_mensal_preco_fechado_cc",
    "valor_mensal_preco_fechado_cc": "valor_mensal_preco_fechado_cc",
    "mensal_preco_fechado_financeiro": "valor_mensal_preco_fechado_cc",
    "mensal_escalonado_valor_r_cc": "valor_mensal_escalonado_cc",
    "valor_mensal_escalonado_cc": "valor_mensal_escalonado_cc",
    "mensal_escalonado_financeiro": "valor_mensal_escalonado_cc",
    "mensal_variavel_valor_r_cc": "valor_mensal_variavel_cc",
    "valor_mensal_variavel_cc": "valor_mensal_variavel_cc",
    "mensal_variavel_financeiro": "valor_mensal_variavel_cc",
    "mensal_condicionado_valor_r_cc": "valor_mensal_condicionado_cc",
    "valor_mensal_condicionado_cc": "valor_mensal_condicionado_cc",
    "mensal_condicionado_financeiro": "valor_mensal_condicionado_cc",
    "spot_valor_r_cc": "valor_spot_cc",
    "valor_spot_cc": "valor_spot_cc",
    "spot_financeiro": "valor_spot_cc",
    "spot_com_manutencao_valor_r_cc": "valor_spot_manutencao_cc",
    "valor_spot_manutencao_cc": "valor_spot_manutencao_cc",
    "spot_manutencao_financeiro": "valor_spot_manutencao_cc",
    "spot_parcelado_valor_r_cc": "valor_spot_parcelado_cc",
    "valor_spot_parcelado_cc": "valor_spot_parcelado_cc",
    "spot_parcelado_financeiro": "valor_spot_parcelado_cc",
    "spot_parcelado_com_manutencao_valor_r_cc": "valor_spot_parcelado_manutencao_cc",
    "valor_spot_parcelado_manutencao_cc": "valor_spot_parcelado_manutencao_cc",
    "spot_parcelado_manutencao_financeiro": "valor_spot_parcelado_manutencao_cc",
    "spot_condicionado_valor_r_cc": "valor_spot_condicionado_cc",
    "valor_spot_condicionado_cc": "valor_spot_condicionado_cc",
    "spot_condicionado_financeiro": "valor_spot_condicionado_cc",
    "exito_valor_r_cc": "valor_exito_cc",
    "valor_exito_cc": "valor_exito_cc",
    "exito_financeiro": "valor_exito_cc",
    "rateio_porcentagem_reestruturacao_insolvencia_cc": "rateio_reestruturacao_cc",
    "rateio_reestruturacao_cc": "rateio_reestruturacao_cc",
    "rateio_porcentagem_insolvencia_financeiro": "rateio_reestruturacao_cc",
    "rateio_porcentagem_civel_cc": "rateio_civel_cc",
    "rateio_civel_cc": "rateio_civel_cc",
    "rateio_porcentagem_civel_financeiro": "rateio_civel_cc",
    "rateio_porcentagem_trabalhista_cc": "rateio_trabalhista_cc",
    "rateio_trabalhista_cc": "rateio_trabalhista_cc",
    "rateio_porcentagem_trabalhista_financeiro": "rateio_trabalhista_cc",
    "rateio_porcentagem_tributario_cc": "rateio_tributario_cc",
    "rateio_tributario_cc": "rateio_tributario_cc",
    "rateio_porcentagem_tributario_financeiro": "rateio_tributario_cc",
    "rateio_porcentagem_contratos_societario_cc": "rateio_contratos_cc",
    "rateio_contratos_societario_cc": "rateio_contratos_cc",
    "rateio_contratos_cc": "rateio_contratos_cc",
    "rateio_porcentagem_contratos_financeiro": "rateio_contratos_cc",
    "rateio_porcentagem_add_cc": "rateio_add_cc",
    "rateio_add_cc": "rateio_add_cc",
    "rateio_porcentagem_add_financeiro": "rateio_add_cc",
    "prazo_para_confecao_do_contrato_cc": "prazo_contrato_cc",
    "prazo_confecao_contrato_cc": "prazo_contrato_cc",
    "prazo_contrato_cc": "prazo_contrato_cc",
    "prazo_entrega_contrato": "prazo_contrato_cc",
    # [CC] sem validação (mantidos para relatório)
    "tipo_instrumento_cc": "tipo_instrumento_cc",
    "tipo_de_instrumento_cc": "tipo_instrumento_cc",
    "tipo_instrumento": "tipo_instrumento_cc",
    "limitacao_processos_cc": "limitacao_processos_cc",
    "limitacao_processos": "limitacao_processos_cc",
    "limitacao_horas_cc": "limitacao_horas_cc",
    "limitacao_horas_consultivo_cc": "limitacao_horas_cc",
    "limitacao_horas": "limitacao_horas_cc",
    "responsavel_elaboracao_cc": "responsavel_elaboracao_cc",
    "responsavel_elaboracao": "responsavel_elaboracao_cc",
    "responsavel_pela_elaboracao": "responsavel_elaboracao_cc",
    # Contrato assinado [CA]
    "data_assinatura": "data_assinatura_contrato",
    "data_de_assinatura_do_contrato": "data_assinatura_contrato",
    "data_assinatura_contrato": "data_assinatura_contrato",
}

# Process-wide, read-only
ALIAS_TABLE: Mapping[str, str] = MappingProxyType(_ALIASES)


def normalize_overrides(raw: Any) -> dict[str, str]:
    """Clean caller overrides: keys normalized, blank or non-string entries dropped."""
    overrides: dict[str, str] = {}
    if not isinstance(raw, Mapping):
        return overrides
    for column, key in raw.items():
        if not isinstance(column, str) or not isinstance(key, str):
            continue
        token = normalize_header(column.strip())
        target = key.strip()
        if token and target:
            overrides[token] = target
    return overrides


def resolve_key(token: str, overrides: Mapping[str, str] | None = None) -> str:
    """Canonical key for a normalized token (overrides > alias table > token)."""
    if overrides and token in overrides:
        return overrides[token]
    return ALIAS_TABLE.get(token, token)


def build_header_keys(headers: Iterable[Any], overrides: Mapping[str, str] | None = None) -> list[str]:
    """Resolve every header of a sheet, in column order.

    Blank headers resolve to "" (the materializer assigns them a positional key).
    """
    return [resolve_key(normalize_header("" if h is None else str(h).strip()), overrides) for h in headers]


def describe_mapping() -> dict[str, list[str]]:
    """Canonical key -> alias tokens, for catalog output."""
    key_to_columns: dict[str, list[str]] = {}
    for token, key in ALIAS_TABLE.items():
        key_to_columns.setdefault(key, []).append(token)
    return key_to_columns
