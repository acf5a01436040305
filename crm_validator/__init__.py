"""CRM pipeline sheet validator.

Normalizes rows exported from a spreadsheet-backed sales pipeline onto canonical
fields, runs the stage-dependent rule set and derives reporting/SLA fields.
"""

from .services.engine import validate_sheet

__all__ = [
    "validate_sheet",
]

__version__ = "0.1.0"
