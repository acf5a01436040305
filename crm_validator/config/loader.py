from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import RuleSettings, ValidatorConfig

"""Config loader.

Responsibilities:
- Load the YAML config (config/validate.yml, or $CRM_VALIDATOR_CONFIG)
- Validate it against the bundled JSON schema (unknown keys are rejected)
- Apply defaults (header_row=1, timezone=UTC) and build a ValidatorConfig
"""

__all__ = [
    "CONFIG_ENV_VAR",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
    "resolve_config_path",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/validate.yml")
CONFIG_ENV_VAR = "CRM_VALIDATOR_CONFIG"


class ConfigError(Exception):
    pass


def resolve_config_path(explicit: str | Path | None = None) -> Path:
    """--config argument > $CRM_VALIDATOR_CONFIG > config/validate.yml."""
    if explicit:
        return Path(explicit)
    env = os.getenv(CONFIG_ENV_VAR)
    if env:
        return Path(env)
    return DEFAULT_CONFIG_PATH


def _validate_config_schema(data: Any) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: The schema file is missing or not valid JSON, or the data
            fails validation (missing required keys, wrong types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        where = ".".join(str(p) for p in e.absolute_path)
        raise ConfigError(f"config validation failed: {where + ': ' if where else ''}{e.message}") from e


def load_config(path: Path) -> ValidatorConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    _validate_config_schema(data)

    return ValidatorConfig(
        source_directory=data["source_directory"],
        sheet_name=data.get("sheet_name"),
        header_row=data.get("header_row", 1),
        output_directory=data.get("output_directory"),
        timezone=data.get("timezone", "UTC"),
        column_overrides=dict(data.get("column_overrides") or {}),
        validation_config={k: dict(v) for k, v in (data.get("validation_config") or {}).items()},
        rules=RuleSettings.from_mapping(data.get("rules")),
    )
