"""Domain models for the CRM sheet validator.

This package contains the value objects passed between the header normalizer,
the row materializer, the rule engine and the run orchestration.
"""

from .cell import Cell, ListCell, Scalar
from .config_models import DEFAULT_VALIDATION_CONFIG, RuleSettings, ValidatorConfig
from .error_record import ErrorRecord
from .field_error import FieldError
from .processing_result import FileStat, FileStatus, RunResult
from .row_data import RowRecord
from .validation_result import ValidationBatch, ValidationResult

__all__ = [
    # Configuration models
    "DEFAULT_VALIDATION_CONFIG",
    "RuleSettings",
    "ValidatorConfig",
    # Row models
    "Cell",
    "ListCell",
    "Scalar",
    "RowRecord",
    # Results
    "ErrorRecord",
    "FieldError",
    "FileStat",
    "FileStatus",
    "RunResult",
    "ValidationBatch",
    "ValidationResult",
]
