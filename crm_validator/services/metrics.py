from __future__ import annotations

import math
import re
from datetime import UTC, datetime, timedelta, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

"""Derived metrics: status normalization, sheet date parsing and SLA day counts.

Nothing here raises on malformed input. An unparseable date resolves to None,
which the SLA fields report as "no reference".
"""

__all__ = [
    "days_since",
    "normalize_status",
    "parse_sheet_date",
    "resolve_timezone",
]

# Checked in order: loss first, then win, then in-progress
_STATUS_GROUPS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("lost", ("lost", "loss", "perd")),
    ("win", ("won", "win", "ganh", "vend")),
    ("ongoing", ("ongoing", "andamento", "abert")),
)

_DMY = re.compile(
    r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})(?:\s+(\d{1,2}):(\d{2})(?::(\d{2}))?)?"
)

# Spreadsheet serial day 0
_SERIAL_EPOCH = datetime(1899, 12, 30, tzinfo=UTC)
_SERIAL_MAX = 300000

_DAY = timedelta(days=1)


def normalize_status(raw: Any) -> str | None:
    """Map free-text status onto lost/win/ongoing.

    Unrecognized text is returned lowercased so callers still see it; blank
    input yields None.
    """
    text = "" if raw is None else str(raw).strip().lower()
    if not text:
        return None
    for status, tokens in _STATUS_GROUPS:
        if any(t in text for t in tokens):
            return status
    return text


def resolve_timezone(name: str | None) -> tzinfo:
    """tzinfo for a zone name; UTC for None, "UTC" or unknown names."""
    if not name or name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return UTC


def _from_serial(serial: float) -> str | None:
    if not (1 <= serial < _SERIAL_MAX):
        return None
    return (_SERIAL_EPOCH + timedelta(days=serial)).isoformat()


def _from_iso(text: str, tz: tzinfo) -> str | None:
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed.isoformat()


def _from_day_month(text: str, tz: tzinfo) -> str | None:
    m = _DMY.match(text)
    if not m:
        return None
    first, second, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
    hour, minute, second_ = (int(g) if g else 0 for g in m.group(4, 5, 6))
    if second > 12 and first <= 12:
        # 2º número > 12: só pode ser MM/DD
        day, month = second, first
    else:
        day, month = first, second
    try:
        parsed = datetime(year, month, day, hour, minute, second_, tzinfo=tz)
    except ValueError:
        return None
    return parsed.isoformat()


def parse_sheet_date(value: Any, tz: tzinfo = UTC) -> str | None:
    """Parse a sheet date into an ISO-8601 string.

    Accepted forms, in order:
    1. spreadsheet serial day numbers (numeric cell or numeric text)
    2. ISO-8601; naive values are interpreted in tz
    3. D/M/YYYY[ H:mm[:ss]] with 1-2 digit day/month; missing time is 00:00.
       When the second number exceeds 12 the text is read as M/D/YYYY.

    Anything else yields None.

    Examples:
        >>> parse_sheet_date("25/07/2025 14:30")
        '2025-07-25T14:30:00+00:00'
        >>> parse_sheet_date("not a date") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return _from_serial(float(value))
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        number = None
    if number is not None:
        return _from_serial(number) if math.isfinite(number) else None
    return _from_iso(text, tz) or _from_day_month(text, tz)


def days_since(reference_iso: str | None, now: datetime) -> int | None:
    """Whole days elapsed between reference_iso and now (floor, never negative).

    None without a usable reference.
    """
    if not reference_iso:
        return None
    try:
        reference = datetime.fromisoformat(reference_iso)
    except ValueError:
        return None
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return max(0, math.floor((now - reference) / _DAY))
