from __future__ import annotations

from ..models.processing_result import RunResult

"""SUMMARY line rendering.

Format (single line, stable key order):
SUMMARY files={ok}/{total} rows={rows} valid={valid} invalid={invalid}
skipped={skipped} failed_rows={failed_rows} elapsed_sec={elapsed}
"""

__all__ = [
    "format_elapsed",
    "render_summary_line",
]


def format_elapsed(seconds: float) -> str:
    """Render seconds without scientific notation; integers lose their '.0'."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a run.

    Examples:
        >>> from datetime import datetime, UTC
        >>> t = datetime(2025, 1, 1, tzinfo=UTC)
        >>> render_summary_line(RunResult(t, t, 2.0, []))
        'SUMMARY files=0/0 rows=0 valid=0 invalid=0 skipped=0 failed_rows=0 elapsed_sec=2'
    """
    read_ok = result.total_files - result.failed_files
    return (
        f"SUMMARY files={read_ok}/{result.total_files} "
        f"rows={result.total_rows} "
        f"valid={result.valid_rows} "
        f"invalid={result.invalid_rows} "
        f"skipped={result.skipped_rows} "
        f"failed_rows={result.failed_rows} "
        f"elapsed_sec={format_elapsed(result.elapsed_seconds)}"
    )
