from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

"""Run result models.

Aggregates the per-file outcome of a CLI run for the SUMMARY line and the exit
code decision.
"""

__all__ = [
    "FileStat",
    "FileStatus",
    "RunResult",
]


class FileStatus(Enum):
    """Outcome of one source file.

    - SUCCESS: file read and every emitted row valid
    - INVALID_ROWS: file read, at least one row carries errors
    - FAILED: file could not be read
    """
    SUCCESS = "success"
    INVALID_ROWS = "invalid_rows"
    FAILED = "failed"


@dataclass(frozen=True)
class FileStat:
    """Per-file statistics."""
    file_name: str
    status: FileStatus
    total_rows: int  # emitted results
    invalid_rows: int
    skipped_rows: int  # excluded stages
    failed_rows: int  # rows that raised
    elapsed_seconds: float
    error: str | None = None  # read failure reason
    output_path: str | None = None


@dataclass(frozen=True)
class RunResult:
    """Aggregated results of a run."""
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat]

    @property
    def total_files(self) -> int:
        return len(self.file_stats)

    @property
    def failed_files(self) -> int:
        return sum(1 for f in self.file_stats if f.status is FileStatus.FAILED)

    @property
    def total_rows(self) -> int:
        return sum(f.total_rows for f in self.file_stats)

    @property
    def invalid_rows(self) -> int:
        return sum(f.invalid_rows for f in self.file_stats)

    @property
    def valid_rows(self) -> int:
        return self.total_rows - self.invalid_rows

    @property
    def skipped_rows(self) -> int:
        return sum(f.skipped_rows for f in self.file_stats)

    @property
    def failed_rows(self) -> int:
        return sum(f.failed_rows for f in self.file_stats)
