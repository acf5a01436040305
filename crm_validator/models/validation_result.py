from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .field_error import FieldError

"""Validation result models.

ValidationResult is the verdict for one emitted row, with the derived reporting
fields attached. ValidationBatch aggregates a whole sheet in the shape the
request handler returns: {results, total, comErros}.
"""

__all__ = [
    "ValidationBatch",
    "ValidationResult",
]


@dataclass(frozen=True)
class ValidationResult:
    """Verdict and derived fields for one spreadsheet row."""
    row_index: int  # Spreadsheet row number (header = 1)
    errors: tuple[FieldError, ...] = ()
    record_label: str = ""
    stage_name: str | None = None
    funnel: str | None = None
    # Derived metrics
    status: str | None = None  # win | lost | ongoing | raw lowercase text
    status_raw: str | None = None
    lost_reason: str | None = None
    created_at_iso: str | None = None
    updated_at_iso: str | None = None
    follow_up_iso: str | None = None
    follow_up_note: str | None = None
    days_since_reference: int | None = None
    days_since_follow_up: int | None = None
    # Notification targets
    notify_email: str = ""
    requester_email: str = ""
    notify_phone: str | None = None
    # Reporting extras
    deal_id: str | None = None
    areas: str | None = None
    company_name: str | None = None
    lead_name: str | None = None
    amounts: dict[str, str | None] = field(default_factory=dict)
    record: dict[str, str] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation (camelCase keys)."""
        data: dict[str, Any] = {
            "rowIndex": self.row_index,
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "recordLabel": self.record_label,
            "stageName": self.stage_name,
            "funnel": self.funnel,
            "status": self.status,
            "statusRaw": self.status_raw,
            "lostReason": self.lost_reason,
            "createdAtIso": self.created_at_iso,
            "updatedAtIso": self.updated_at_iso,
            "followUpIso": self.follow_up_iso,
            "followUpNote": self.follow_up_note,
            "daysSinceReference": self.days_since_reference,
            "daysSinceFollowUp": self.days_since_follow_up,
            "notifyEmail": self.notify_email,
            "requesterEmail": self.requester_email,
            "notifyPhone": self.notify_phone,
            "dealId": self.deal_id,
            "areas": self.areas,
            "companyName": self.company_name,
            "leadName": self.lead_name,
        }
        data.update(self.amounts)
        data["record"] = dict(self.record)
        return data


@dataclass(frozen=True)
class ValidationBatch:
    """All results of one sheet.

    skipped counts rows dropped by the stage exclusion list; failed counts rows
    excluded because processing raised (see the error log).
    """
    results: tuple[ValidationResult, ...] = ()
    skipped: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def invalid_count(self) -> int:
        return sum(1 for r in self.results if not r.valid)

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "total": self.total,
            "comErros": self.invalid_count,
        }
