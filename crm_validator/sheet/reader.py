from __future__ import annotations

import json
from datetime import date, datetime, time
from pathlib import Path
from typing import Any
from zipfile import BadZipFile

import pandas as pd

"""Sheet export reader.

Turns a CRM export on disk into the raw cell matrix the engine consumes
(header row first). Supported inputs:

- .xlsx: read with pandas/openpyxl, first sheet unless a name is given
- .csv: read with pandas, every cell as text
- .json: either a bare matrix or a Sheets API payload {"values": [...]}

Date cells are rendered the way the spreadsheet UI shows them (DD/MM/YYYY, plus
HH:MM when a time is present) so format checks see the same text a user typed.
"""

__all__ = [
    "SUPPORTED_SUFFIXES",
    "SheetHeaderError",
    "SheetReadError",
    "read_sheet",
]

SUPPORTED_SUFFIXES = (".xlsx", ".csv", ".json")


class SheetReadError(Exception):
    """Raised when a source file cannot be read as a sheet."""


class SheetHeaderError(SheetReadError):
    """Raised when the configured header row does not exist."""


def _format_cell(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (list, tuple, dict)):
        return value
    if pd.isna(value):
        return None
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.strftime("%d/%m/%Y")
        return value.strftime("%d/%m/%Y %H:%M")
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return value


def _frame_to_rows(df: pd.DataFrame) -> list[list[Any]]:
    return [[_format_cell(v) for v in raw] for raw in df.itertuples(index=False, name=None)]


def _read_json(path: Path) -> list[list[Any]]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SheetReadError(f"invalid json in {path.name}: {e}") from e
    if isinstance(payload, dict):
        payload = payload.get("values", [])
    if not isinstance(payload, list):
        raise SheetReadError(f"{path.name}: expected a list of rows")
    return [list(r) if isinstance(r, list) else [] for r in payload]


def _trim_trailing_blank(rows: list[list[Any]]) -> list[list[Any]]:
    while rows and all(v is None or (isinstance(v, str) and not v.strip()) for v in rows[-1]):
        rows.pop()
    return rows


def read_sheet(path: Path, sheet_name: str | None = None, header_row: int = 1) -> list[list[Any]]:
    """Read a source file into a raw cell matrix.

    Parameters
    ----------
    path: source file (.xlsx / .csv / .json)
    sheet_name: workbook sheet, None for the first one (ignored for csv/json)
    header_row: 1-based row holding the column titles; rows above it are dropped

    Raises
    ------
    SheetReadError: unsupported suffix, unreadable file or missing sheet
    SheetHeaderError: the file has fewer rows than header_row
    """
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise SheetReadError(f"unsupported file type: {path.name}")
    try:
        if suffix == ".json":
            rows = _read_json(path)
        elif suffix == ".csv":
            df = pd.read_csv(path, header=None, dtype=str, keep_default_na=False)
            rows = _frame_to_rows(df)
        else:
            df = pd.read_excel(path, sheet_name=sheet_name or 0, header=None)
            rows = _frame_to_rows(df)
    except SheetReadError:
        raise
    except (OSError, ValueError, BadZipFile) as e:
        raise SheetReadError(f"failed to read {path.name}: {e}") from e

    rows = _trim_trailing_blank(rows)
    if len(rows) < header_row:
        raise SheetHeaderError(f"{path.name} lacks header row {header_row}")
    return rows[header_row - 1:]
