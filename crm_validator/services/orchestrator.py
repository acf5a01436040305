from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ValidatorConfig
from ..models.error_record import ErrorRecord
from ..models.processing_result import FileStat, FileStatus, RunResult
from ..models.validation_result import ValidationBatch
from ..sheet.reader import SUPPORTED_SUFFIXES, SheetReadError, read_sheet
from .engine import validate_sheet
from .metrics import resolve_timezone
from .progress import ProgressTracker

"""Run orchestration.

run_all() validates every export in the configured source directory:
scan (non-recursive) -> read -> validate_sheet -> optional JSON output. A file
that cannot be read is recorded as FAILED and the run continues; only a missing
or unreadable source directory aborts the run (ProcessingError).
"""

__all__ = [
    "FILE_READ_ERROR",
    "ProcessingError",
    "run_all",
    "scan_source_files",
    "validate_file",
]

logger = logging.getLogger(__name__)

FILE_READ_ERROR = "FILE_READ_ERROR"
RESULTS_SUFFIX = ".results.json"


class ProcessingError(Exception):
    """Fatal run error (the source directory cannot be used)."""


def scan_source_files(directory: Path) -> list[Path]:
    """Supported export files directly under directory, sorted by name.

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        return sorted(
            (p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in SUPPORTED_SUFFIXES),
            key=lambda p: p.name,
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def validate_file(
    path: Path, config: ValidatorConfig, error_log: ErrorLogBuffer, now: datetime | None = None
) -> ValidationBatch:
    """Read one export and validate it. SheetReadError propagates."""
    rows = read_sheet(path, sheet_name=config.sheet_name, header_row=config.header_row)
    return validate_sheet(
        rows,
        config.column_overrides,
        config.validation_config,
        rules=config.rules,
        now=now,
        tz=resolve_timezone(config.timezone),
        error_log=error_log,
        source=path.name,
    )


def _write_results(batch: ValidationBatch, source: Path, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    out = output_dir / f"{source.stem}{RESULTS_SUFFIX}"
    out.write_text(json.dumps(batch.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    return out


def run_all(
    config: ValidatorConfig, error_log: ErrorLogBuffer | None = None, now: datetime | None = None
) -> RunResult:
    """Validate every export in config.source_directory.

    Args:
        config: Loaded configuration
        error_log: Buffer for row/file errors; a fresh one is used when None
        now: Fixed clock for the day counts (current time when None)

    Returns:
        RunResult with one FileStat per scanned file

    Raises:
        ProcessingError: The source directory is missing or unreadable
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    file_paths = scan_source_files(Path(config.source_directory))
    output_dir = Path(config.output_directory) if config.output_directory else None

    if not file_paths:
        logger.warning("No supported files in %s", config.source_directory)

    file_stats: list[FileStat] = []
    rows_seen = 0
    invalid_seen = 0
    with ProgressTracker(len(file_paths)) as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            file_start = datetime.now(UTC)
            try:
                batch = validate_file(file_path, config, error_log, now)
            except SheetReadError as e:
                logger.error("%s: %s", file_path.name, e)
                error_log.append(
                    ErrorRecord.create(
                        file=file_path.name,
                        sheet=config.sheet_name or "",
                        row=-1,
                        error_type=FILE_READ_ERROR,
                        message=str(e),
                    )
                )
                file_stats.append(
                    FileStat(
                        file_name=file_path.name,
                        status=FileStatus.FAILED,
                        total_rows=0,
                        invalid_rows=0,
                        skipped_rows=0,
                        failed_rows=0,
                        elapsed_seconds=(datetime.now(UTC) - file_start).total_seconds(),
                        error=str(e),
                    )
                )
                progress.finish_file()
                continue

            output_path = _write_results(batch, file_path, output_dir) if output_dir else None
            invalid = batch.invalid_count
            rows_seen += batch.total
            invalid_seen += invalid
            logger.info(
                "%s: rows=%d invalid=%d skipped=%d failed=%d",
                file_path.name,
                batch.total,
                invalid,
                batch.skipped,
                batch.failed,
            )
            file_stats.append(
                FileStat(
                    file_name=file_path.name,
                    status=FileStatus.INVALID_ROWS if invalid or batch.failed else FileStatus.SUCCESS,
                    total_rows=batch.total,
                    invalid_rows=invalid,
                    skipped_rows=batch.skipped,
                    failed_rows=batch.failed,
                    elapsed_seconds=(datetime.now(UTC) - file_start).total_seconds(),
                    output_path=str(output_path) if output_path else None,
                )
            )
            progress.set_postfix(rows=rows_seen, invalid=invalid_seen)
            progress.finish_file()

    try:
        written = error_log.flush()
    except OSError as e:
        logger.warning("Failed to write error log: %s", e)
    else:
        if written is not None:
            logger.info("Error log written: %s", written)

    end_time = datetime.now(UTC)
    return RunResult(
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )
