from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime, tzinfo
from typing import Any

from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import DEFAULT_VALIDATION_CONFIG, RuleSettings
from ..models.error_record import ErrorRecord
from ..models.row_data import RowRecord
from ..models.validation_result import ValidationBatch, ValidationResult
from ..sheet.headers import build_header_keys, describe_mapping, normalize_overrides
from ..sheet.materializer import materialize_row
from .classifier import StageInfo, classify
from .metrics import days_since, normalize_status, parse_sheet_date
from .notify import resolve_notify_email, resolve_notify_phone, resolve_requester_email
from .rules import validate_record

"""Sheet validation engine.

validate_sheet() runs the whole per-row pipeline over a raw cell matrix:
materialize -> classify -> drop excluded stages -> validate -> derive -> emit.

Bad data never raises; it becomes FieldErrors or empty derived fields. An
unexpected exception while processing a row is logged, recorded in the error
log buffer (when one is given) and the row is left out of the batch.
"""

__all__ = [
    "ROW_PROCESSING_ERROR",
    "build_result",
    "mapping_catalog",
    "validate_sheet",
]

logger = logging.getLogger(__name__)

ROW_PROCESSING_ERROR = "ROW_PROCESSING_ERROR"

# Output key -> record keys, first non-empty wins
_AMOUNT_KEYS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("valorMensalFixoCc", ("valor_mensal_fixo_cc",)),
    ("valorExitoCc", ("valor_exito_cc",)),
    ("valorMensalPrecoFechadoCc", ("valor_mensal_preco_fechado_cc",)),
)


def _or_none(value: str) -> str | None:
    return value or None


def _record_label(record: RowRecord) -> str:
    return (
        record.first("nome", "nome_lead", "id_registro", "deal_id", "razao_social")
        or f"Linha {record.row_number}"
    )


def build_result(
    record: RowRecord,
    stage: StageInfo,
    errors: Sequence[Any],
    now: datetime,
    tz: tzinfo = UTC,
) -> ValidationResult:
    """Attach the derived reporting fields to a row verdict."""
    created = parse_sheet_date(record.first("created_at"), tz)
    updated = parse_sheet_date(record.first("updated_at"), tz)
    follow_up = parse_sheet_date(record.first("follow_up"), tz)
    status_raw = record.first("status")

    return ValidationResult(
        row_index=record.row_number,
        errors=tuple(errors),
        record_label=_record_label(record),
        stage_name=_or_none(stage.stage_name),
        funnel=_or_none(stage.funnel),
        status=normalize_status(status_raw),
        status_raw=_or_none(status_raw),
        lost_reason=_or_none(record.first("motivo_perda")),
        created_at_iso=created,
        updated_at_iso=updated,
        follow_up_iso=follow_up,
        follow_up_note=_or_none(record.first("follow_up_anotacao")),
        days_since_reference=days_since(updated or created, now),
        days_since_follow_up=days_since(follow_up, now),
        notify_email=resolve_notify_email(record),
        requester_email=resolve_requester_email(record),
        notify_phone=resolve_notify_phone(record),
        deal_id=_or_none(record.first("deal_id", "id_registro")),
        areas=_or_none(record.first("areas_analise", "areas_envolvidas")),
        company_name=_or_none(record.first("razao_social", "razao_social_cp")),
        lead_name=_or_none(record.first("nome_lead", "nome")),
        amounts={out: _or_none(record.first(*keys)) for out, keys in _AMOUNT_KEYS},
        record=record.to_dict(),
    )


def validate_sheet(
    raw_rows: Sequence[Sequence[Any]] | None,
    column_overrides: Mapping[str, str] | None = None,
    validation_config: Any = None,
    *,
    rules: RuleSettings | None = None,
    now: datetime | None = None,
    tz: tzinfo = UTC,
    error_log: ErrorLogBuffer | None = None,
    source: str = "",
) -> ValidationBatch:
    """Validate a raw cell matrix (header row first).

    Args:
        raw_rows: Header row followed by data rows; empty input gives an empty batch
        column_overrides: Header token -> canonical key, applied before the alias table
        validation_config: Enable-map (scope -> field -> bool) overlaid on the defaults
        rules: Rule constants; defaults when None
        now: Clock used for the day counts (current UTC time when None)
        tz: Zone for naive sheet dates
        error_log: Buffer receiving one ErrorRecord per row that raised
        source: File name recorded with row errors

    Returns:
        ValidationBatch with one result per emitted row, in sheet order
    """
    rows = list(raw_rows or [])
    if not rows:
        return ValidationBatch()

    settings = rules or RuleSettings()
    clock = now or datetime.now(UTC)
    header_keys = build_header_keys(rows[0] or [], normalize_overrides(column_overrides))

    results: list[ValidationResult] = []
    skipped = 0
    failed = 0
    for offset, raw in enumerate(rows[1:], start=1):
        # Spreadsheet numbering: header is row 1
        row_number = offset + 1
        try:
            record = materialize_row(raw, header_keys, row_number)
            stage = classify(record)
            if stage.excluded:
                skipped += 1
                continue
            errors = validate_record(record, stage, settings, validation_config)
            results.append(build_result(record, stage, errors, clock, tz))
        except Exception as e:
            failed += 1
            logger.error("Row %s%s failed: %s", row_number, f" of {source}" if source else "", e)
            if error_log is not None:
                error_log.append(
                    ErrorRecord.create(
                        file=source,
                        sheet="",
                        row=row_number,
                        error_type=ROW_PROCESSING_ERROR,
                        message=str(e),
                    )
                )

    logger.debug(
        "Validated %d rows (%d skipped, %d failed)%s",
        len(results),
        skipped,
        failed,
        f" from {source}" if source else "",
    )
    return ValidationBatch(results=tuple(results), skipped=skipped, failed=failed)


def mapping_catalog() -> dict[str, Any]:
    """Default enable-map and the canonical key -> header alias catalog."""
    return {
        "defaultValidationConfig": {scope: dict(f) for scope, f in DEFAULT_VALIDATION_CONFIG.items()},
        "columnMapping": describe_mapping(),
    }
