from __future__ import annotations

import json
import math
from collections.abc import Sequence
from typing import Any

from ..models.cell import EMPTY_PLACEHOLDERS, Cell, ListCell, Scalar
from ..models.row_data import RowRecord

"""Row materialization.

Combines the cells of one spreadsheet row into a RowRecord keyed by canonical
field. Several columns may alias the same key; the merge never lets an empty
alias blank out a value another column already filled:

- incoming empty, slot filled      -> keep the slot
- incoming non-empty               -> write (last non-empty wins)

Ragged rows are padded with empties; nothing here raises on data.
"""

__all__ = [
    "coerce_cell",
    "materialize_row",
]


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def coerce_cell(value: Any) -> Cell:
    """Resolve the raw cell shape once: list-like -> ListCell, else Scalar."""
    if isinstance(value, (list, tuple)):
        return ListCell(items=tuple(_cell_text(v) for v in value))
    return Scalar(text=_cell_text(value))


def _is_filled(value: str | None) -> bool:
    if value is None:
        return False
    stripped = value.strip()
    return stripped != "" and stripped not in EMPTY_PLACEHOLDERS


def materialize_row(row: Sequence[Any] | None, header_keys: Sequence[str], row_number: int) -> RowRecord:
    """Build the semantic record for one row.

    Args:
        row: Raw cell values (may be shorter or longer than the header)
        header_keys: Canonical key per column, from build_header_keys()
        row_number: Spreadsheet row number used to identify the record

    Returns:
        Frozen RowRecord
    """
    cells = list(row or [])
    data: dict[str, str] = {}
    for index, key in enumerate(header_keys):
        slot = key or f"col_{index}"
        raw = cells[index] if index < len(cells) else None
        text = coerce_cell(raw).display()
        if text == "" and _is_filled(data.get(slot)):
            continue
        data[slot] = text

    # Planilhas com só o e-mail do solicitante: usar também como "cadastrado por"
    if not data.get("cadastrado_por", "").strip():
        data["cadastrado_por"] = data.get("email", "").strip()

    return RowRecord(row_number=row_number, values=data)
