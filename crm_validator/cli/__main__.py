from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import ConfigError, load_config, resolve_config_path
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.config_models import ValidatorConfig
from ..services.engine import mapping_catalog
from ..services.orchestrator import ProcessingError, run_all, scan_source_files
from ..services.summary import render_summary_line
from ..sheet.reader import SheetReadError, read_sheet

"""CLI entrypoint.

python -m crm_validator.cli [--config PATH] [--debug] [--inspect-data] [--show-mapping]

Exit codes:
- 0: every emitted row valid and every file read
- 2: some rows invalid, some rows failed, or some files unreadable
- 1: fatal (config error, missing source directory)
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

INSPECT_ROWS = 3


def _load_env_file(path: Path) -> None:
    """Load .env with python-dotenv; existing environment variables win."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="crm-validate", description="Validate CRM pipeline spreadsheet exports"
    )
    p.add_argument("--config", help="Config file (default: $CRM_VALIDATOR_CONFIG or config/validate.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print headers & first rows of each file then exit")
    p.add_argument("--show-mapping", action="store_true", help="Print the column mapping catalog as JSON then exit")
    return p.parse_args(argv)


def _inspect_data(cfg: ValidatorConfig) -> int:
    files = scan_source_files(Path(cfg.source_directory))
    if not files:
        print("inspect: no supported files")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            rows = read_sheet(f, sheet_name=cfg.sheet_name, header_row=cfg.header_row)
        except SheetReadError as e:
            print(f"  read_error: {e}")
            continue
        print(f"  HEADERS: {rows[0]}")
        for row in rows[1 : 1 + INSPECT_ROWS]:
            print(f"  ROW: {json.dumps(row, ensure_ascii=False, default=str)}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # Only read sys.argv when no list is given: cli_main([]) must not see pytest's flags
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.show_mapping:
        print(json.dumps(mapping_catalog(), ensure_ascii=False, indent=2))
        return EXIT_SUCCESS_ALL

    _load_env_file(Path(".env"))
    config_path = resolve_config_path(args.config)
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    directory = Path(cfg.source_directory)
    if not directory.is_dir():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL

    logger.info(f"Validating files from: {directory}")

    try:
        if args.inspect_data:
            return _inspect_data(cfg)
        result = run_all(cfg, ErrorLogBuffer())
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(result).removeprefix("SUMMARY "))

    if result.failed_files or result.invalid_rows or result.failed_rows:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
