from __future__ import annotations

from dataclasses import dataclass
from typing import Union

"""Cell value model.

A spreadsheet cell arrives either as a single value or, for multi-select CRM
fields, as a list of values. The shape is resolved once while materializing a
row; validators only ever see the resulting display string.
"""

__all__ = [
    "Cell",
    "ListCell",
    "Scalar",
    "EMPTY_PLACEHOLDERS",
]

# Serialized empty array/object as sent by some CRM exports
EMPTY_PLACEHOLDERS = frozenset({"[]", "{}"})


def _clean(text: str) -> str:
    stripped = text.strip()
    return "" if stripped in EMPTY_PLACEHOLDERS else stripped


@dataclass(frozen=True)
class Scalar:
    """Single cell value, already stringified."""
    text: str

    def display(self) -> str:
        return _clean(self.text)


@dataclass(frozen=True)
class ListCell:
    """Multi-valued cell. Display joins the non-empty entries with ", "."""
    items: tuple[str, ...]

    def display(self) -> str:
        parts = [s for s in (item.strip() for item in self.items) if s]
        return _clean(", ".join(parts))


Cell = Union[Scalar, ListCell]
