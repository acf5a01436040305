from __future__ import annotations

from datetime import UTC, datetime

from crm_validator.models.processing_result import FileStat, FileStatus, RunResult
from crm_validator.services.summary import format_elapsed, render_summary_line

T = datetime(2025, 1, 1, tzinfo=UTC)


def test_render_summary_line_counts():
    stats = [
        FileStat("a.xlsx", FileStatus.SUCCESS, 3, 0, 2, 0, 0.5),
        FileStat("b.csv", FileStatus.INVALID_ROWS, 5, 2, 0, 1, 0.3),
        FileStat("c.json", FileStatus.FAILED, 0, 0, 0, 0, 0.0, error="bad"),
    ]
    line = render_summary_line(RunResult(T, T, 0.84, stats))
    assert line == "SUMMARY files=2/3 rows=8 valid=6 invalid=2 skipped=2 failed_rows=1 elapsed_sec=0.84"


def test_render_summary_line_empty_run():
    line = render_summary_line(RunResult(T, T, 0.0, []))
    assert line == "SUMMARY files=0/0 rows=0 valid=0 invalid=0 skipped=0 failed_rows=0 elapsed_sec=0"


def test_format_elapsed():
    assert format_elapsed(2.0) == "2"
    assert format_elapsed(0.000123) == "0.000123"
    assert format_elapsed(1.23456) == "1.235"
