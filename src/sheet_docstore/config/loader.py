from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError as SchemaValidationError

from ..models.config_models import DocStoreConfig, StoreConfig

"""Config loader.

Responsibilities:
- Load YAML (default: config/docstore.yml)
- Validate against config_schema.json (shipped next to this module)
- Apply defaults (backend=excel, key_field=id, array_separator=",")
- Apply environment overrides DOCSTORE_WORKBOOK / DOCSTORE_COLLECTION
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
    "config_from_dict",
]

DEFAULT_CONFIG_PATH = Path("config/docstore.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")

ENV_WORKBOOK = "DOCSTORE_WORKBOOK"
ENV_COLLECTION = "DOCSTORE_COLLECTION"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing / not valid JSON, or the data violates
            the schema (missing required keys, wrong types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except SchemaValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def config_from_dict(data: dict[str, Any], env: Mapping[str, str] | None = None) -> DocStoreConfig:
    """Validate a raw mapping and build DocStoreConfig (env overrides applied)."""
    _validate_config_schema(data)
    env = os.environ if env is None else env

    store_raw = data.get("store", {})
    backend = store_raw.get("backend", "excel")
    workbook = env.get(ENV_WORKBOOK) or store_raw.get("workbook")
    collection = env.get(ENV_COLLECTION) or store_raw.get("default_collection")
    if backend == "excel" and not workbook:
        raise ConfigError(f"store.workbook is required for the excel backend (or set {ENV_WORKBOOK})")

    return DocStoreConfig(
        store=StoreConfig(backend=backend, workbook=workbook, default_collection=collection),
        key_field=data.get("key_field", "id"),
        array_separator=data.get("array_separator", ","),
        error_log_dir=data.get("error_log_dir", "./logs"),
    )


def load_config(path: Path = DEFAULT_CONFIG_PATH, env: Mapping[str, str] | None = None) -> DocStoreConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    return config_from_dict(data, env)
