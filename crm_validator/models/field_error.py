from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""FieldError model.

One failing check of the rule engine. Validation failures are ordinary output,
never exceptions: each failed check contributes exactly one FieldError.
"""

__all__ = [
    "EMPTY_DISPLAY",
    "FieldError",
]

# current_value shown for blank fields
EMPTY_DISPLAY = "(vazio)"


@dataclass(frozen=True)
class FieldError:
    """Field-level diagnosis.

    Attributes:
        field: Display label of the field (e.g. "Solicitante")
        message: Short diagnosis
        remediation: How to correct the value
        current_value: Value seen in the sheet, EMPTY_DISPLAY when blank
    """
    field: str
    message: str
    remediation: str
    current_value: str = EMPTY_DISPLAY

    @staticmethod
    def create(field: str, message: str, remediation: str | None, value: Any) -> FieldError:
        """Build a FieldError, trimming the observed value."""
        shown = "" if value is None else str(value).strip()
        return FieldError(
            field=field,
            message=message,
            remediation=remediation or message,
            current_value=shown or EMPTY_DISPLAY,
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "field": self.field,
            "message": self.message,
            "remediation": self.remediation,
            "currentValue": self.current_value,
        }
