from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

"""RowRecord model.

RowRecord is the semantic record of one spreadsheet row after header
normalization and alias merging: canonical key -> display string. The empty
string is the "no value" sentinel. A record is frozen once materialized.
"""

__all__ = [
    "RowRecord",
]


@dataclass(frozen=True)
class RowRecord:
    """Materialized row (canonical key -> value).

    row_number is the 1-based spreadsheet row (header row = 1, first data row = 2).
    """
    row_number: int
    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # somente leitura após a construção
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def get(self, key: str) -> str:
        """Value for key, "" when absent."""
        return self.values.get(key, "")

    def first(self, *keys: str) -> str:
        """First non-empty value among keys (trimmed), "" when none is filled."""
        for key in keys:
            value = self.values.get(key, "").strip()
            if value:
                return value
        return ""

    def keys(self) -> list[str]:
        return list(self.values.keys())

    def to_dict(self) -> dict[str, str]:
        return dict(self.values)
