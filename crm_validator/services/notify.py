from __future__ import annotations

from ..models.row_data import RowRecord

"""Notification target resolution.

Picks who gets chased about a row's errors. Unresolved targets are not errors:
"" (email) / None (phone) just means no notification can be sent.
"""

__all__ = [
    "resolve_notify_email",
    "resolve_notify_phone",
    "resolve_requester_email",
]


def resolve_requester_email(record: RowRecord) -> str:
    return record.first("email", "email_do_solicitante")


def resolve_notify_email(record: RowRecord) -> str:
    # explícito > e-mail do solicitante > cadastrado por
    return record.first("email_notificar") or resolve_requester_email(record) or record.first("cadastrado_por")


def resolve_notify_phone(record: RowRecord) -> str | None:
    return record.first("telefone_notificar", "telefone_ponto_focal") or None
