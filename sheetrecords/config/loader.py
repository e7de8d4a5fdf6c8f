from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..engine.a1 import RangeError, RangeSpec
from ..models.config_models import (
    Operation,
    StepConfig,
    UnmatchedPolicy,
    ValueInputMode,
    ValueRenderMode,
)

"""Step config loader.

Responsibilities:
- Load the step YAML (default config/step.yml)
- Validate it against step_config_schema.json
- Apply defaults and convert enum strings
- Cross-field checks the schema cannot express (range syntax,
  data_start_row > key_row, lookup needs a column)
"""

SCHEMA_PATH = Path(__file__).parent / "step_config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/step.yml")


class ConfigurationError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigurationError: schema file missing / not JSON, or the data
            fails validation (missing keys, wrong types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigurationError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigurationError(f"config validation failed: {e.message}") from e


def step_config_from_dict(data: dict[str, Any]) -> StepConfig:
    """Validate a config mapping and build the StepConfig."""
    if not isinstance(data, dict):
        raise ConfigurationError(f"config must be a mapping, got {type(data).__name__}")
    _validate_config_schema(data)

    cfg = StepConfig(
        operation=Operation(data["operation"]),
        spreadsheet_id=data["spreadsheet_id"],
        range=data.get("range", "A:F"),
        key_row=data.get("key_row", 0),
        data_start_row=data.get("data_start_row", 1),
        key=data.get("key", "id"),
        raw_data=data.get("raw_data", False),
        data_property=data.get("data_property", "data"),
        lookup_column=data.get("lookup_column"),
        lookup_value=data.get("lookup_value"),
        lookup_value_field=data.get("lookup_value_field"),
        return_all_matches=data.get("return_all_matches", False),
        value_input_mode=ValueInputMode(data.get("value_input_mode", "RAW")),
        value_render_mode=ValueRenderMode(data.get("value_render_mode", "UNFORMATTED_VALUE")),
        unmatched=UnmatchedPolicy(data.get("unmatched", "skip")),
        timeout_seconds=float(data.get("timeout_seconds", 30)),
    )

    try:
        RangeSpec.parse(cfg.spreadsheet_id, cfg.range)
    except RangeError as e:
        raise ConfigurationError(f"malformed range: {e}") from e

    if cfg.uses_header and cfg.data_start_row <= cfg.key_row:
        raise ConfigurationError(
            f"data_start_row ({cfg.data_start_row}) must be greater than key_row ({cfg.key_row})"
        )
    if cfg.operation is Operation.LOOKUP and not cfg.lookup_column:
        raise ConfigurationError("lookup requires lookup_column")
    return cfg


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> StepConfig:
    if not path.exists():
        raise ConfigurationError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid yaml: {e}") from e
    return step_config_from_dict(data)
