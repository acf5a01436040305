from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Configuration dataclasses for the CRM sheet validator.

RuleSettings carries the constants the rule engine checks against (requester
whitelist, email domains, document hosts, payment types). ValidatorConfig is the
root object produced by config.loader from the YAML file.
"""

__all__ = [
    "DEFAULT_VALIDATION_CONFIG",
    "RuleSettings",
    "ValidatorConfig",
    "merge_validation_config",
]


# scope -> field -> enabled. Only keys listed here can be toggled.
DEFAULT_VALIDATION_CONFIG: dict[str, dict[str, bool]] = {
    "cadastro_lead": {
        "solicitante": True,
        "email": True,
        "cadastrado_por": True,
        "due_diligence": True,
        "local_reuniao": True,
        "tipo_de_lead": True,
        "razao_social": True,
        "cnpj": True,
        "areas_analise": False,  # retirado da validação
        "prazo_reuniao_due": True,
        "horario_due": True,
        "indicacao": True,
        "nome_indicacao": True,
    },
    "confecao_proposta": {
        "razao_social_cp": True,
        "cnpj_cp": True,
        "qualificacao_completa": True,
        "areas_objeto_contrato_cp": True,
        "realizou_due_diligence": True,
        "gestor_contrato_cp": True,
        "nome_ponto_focal": True,
        "email_ponto_focal": True,
        "telefone_ponto_focal": True,
        "captador_cp": True,
        "tributacao_cp": True,
        "prazo_entrega_cp": True,
        "data_primeiro_vencimento_cp": True,
        "informacoes_adicionais_cp": True,
        "demais_razoes_sociais_cp": True,
        "link_da_proposta": True,
    },
    "proposta_enviada": {
        "link_da_proposta": True,
    },
    "confecao_contrato": {
        "tipo_pagamento_cc": True,
        "objeto_contrato_cc": True,
        "valores_cc": True,
        "rateio_cc": True,
        "prazo_contrato_cc": True,
        "link_do_contrato": True,
    },
}


def merge_validation_config(user_config: Any) -> dict[str, dict[str, bool]]:
    """Overlay a caller enable-map on the defaults.

    Unknown scopes and unknown fields are ignored; values are coerced to bool.
    The defaults are never mutated.
    """
    merged = {scope: dict(fields) for scope, fields in DEFAULT_VALIDATION_CONFIG.items()}
    if not isinstance(user_config, dict):
        return merged
    for scope, fields in merged.items():
        overrides = user_config.get(scope)
        if not isinstance(overrides, dict):
            continue
        for key, enabled in overrides.items():
            if key in fields:
                fields[key] = bool(enabled)
    return merged


DEFAULT_REQUESTER_NAMES: tuple[str, ...] = (
    "Gustavo Bismarchi",
    "Ricardo Viscardi Pires",
    "Giancarlo Zotini",
    "Gabriela Consul",
    "Michel Malaquias",
    "Daniel Pressatto Fernandes",
    "Renato Vallim",
    "Wagner Armani",
    "Jansonn Mendonça Batista",
    "Leonardo Loureiro Basso",
    "Felipe Camargo",
    "Ligia Lopes",
    "Francisco Zanin",
    "Jorge Pecht Souza",
)

# Manual options for "Tipo de pagamento [CC]"
DEFAULT_PAYMENT_TYPES: tuple[str, ...] = (
    "mensal",
    "spot à vista",
    "spot a vista",
    "spot parcelado",
    "escalonado",
    "variável",
    "variavel",
    "alternativo",
    "só êxito",
    "so exito",
    "exito",
)


@dataclass(frozen=True)
class RuleSettings:
    """Constants used by the rule engine.

    Defaults reproduce the firm's filling manual; the YAML `rules` section can
    replace any of them.
    """
    requester_names: tuple[str, ...] = DEFAULT_REQUESTER_NAMES
    current_email_domain: str = "bismarchipires.com.br"
    deprecated_email_domains: tuple[str, ...] = ("bpplaw.com.br",)
    document_hosts: tuple[str, ...] = ("bpplaw2.sharepoint.com", "sharepoint", "vios")
    payment_types: tuple[str, ...] = DEFAULT_PAYMENT_TYPES

    @staticmethod
    def from_mapping(data: dict[str, Any] | None) -> RuleSettings:
        """Build from the YAML `rules` section; absent keys keep their defaults."""
        if not data:
            return RuleSettings()
        defaults = RuleSettings()
        return RuleSettings(
            requester_names=tuple(data.get("requester_names", defaults.requester_names)),
            current_email_domain=str(data.get("current_email_domain", defaults.current_email_domain)),
            deprecated_email_domains=tuple(
                data.get("deprecated_email_domains", defaults.deprecated_email_domains)
            ),
            document_hosts=tuple(data.get("document_hosts", defaults.document_hosts)),
            payment_types=tuple(data.get("payment_types", defaults.payment_types)),
        )


@dataclass(frozen=True)
class ValidatorConfig:
    """Root configuration for a validation run."""
    source_directory: str  # Directory scanned for .xlsx/.csv/.json exports
    sheet_name: str | None = None  # None: first sheet of each workbook
    header_row: int = 1  # 1-based row holding the headers
    output_directory: str | None = None  # None: results are not written
    timezone: str = "UTC"  # Zone for naive sheet dates
    column_overrides: dict[str, str] = field(default_factory=dict)
    validation_config: dict[str, dict[str, bool]] = field(default_factory=dict)
    rules: RuleSettings = field(default_factory=RuleSettings)
