from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from sheetboard.models.config_models import (
    ApiConfig,
    AppConfig,
    ExtractionConfig,
    SyncMode,
    SyncOptions,
)

"""Config loader.

Responsibilities:
- Load YAML config (config/sync.yml by default)
- Validate against config_schema.json (unknown keys rejected)
- Apply defaults for every omitted setting
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/sync.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: schema file missing / not JSON, or the data violates it.
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def default_config() -> AppConfig:
    return AppConfig()


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)
    return _build_config(data)


def _build_config(data: dict[str, Any]) -> AppConfig:
    defaults = SyncOptions()
    api_raw = data.get("api") or {}
    sync_raw = data.get("sync") or {}
    extraction_raw = data.get("extraction") or {}

    api = ApiConfig(
        url=api_raw.get("url", ApiConfig.url),
        timeout_seconds=float(api_raw.get("timeout_seconds", ApiConfig.timeout_seconds)),
        page_size=int(api_raw.get("page_size", ApiConfig.page_size)),
        api_version=api_raw.get("api_version"),
    )

    protected = sync_raw.get("protected_fields")
    sync = SyncOptions(
        mode=SyncMode(sync_raw.get("mode", defaults.mode.value)),
        key_field=sync_raw.get("key_field", defaults.key_field).strip(),
        display_column=sync_raw.get("display_column", defaults.display_column),
        protect_key_column=sync_raw.get("protect_key_column", defaults.protect_key_column),
        # an explicit empty list disables protection entirely
        protected_fields=(
            frozenset(p.strip() for p in protected) if protected is not None
            else defaults.protected_fields
        ),
        preserve_formatting=sync_raw.get("preserve_formatting", defaults.preserve_formatting),
        settle_delay_seconds=float(
            sync_raw.get("settle_delay_seconds", defaults.settle_delay_seconds)
        ),
        group_name=sync_raw.get("group_name"),
    )

    extraction = ExtractionConfig(command=tuple(extraction_raw.get("command", ())))
    return AppConfig(api=api, sync=sync, extraction=extraction)
