from __future__ import annotations

from pathlib import Path

import pytest

from sheetboard.config.loader import ConfigError, default_config, load_config
from sheetboard.models.config_models import DEFAULT_API_URL, SyncMode


def test_load_config_reads_all_sections(write_config: Path):
    cfg = load_config(write_config)

    assert cfg.api.url == "https://board.example.test/v2"
    assert cfg.api.timeout_seconds == 10.0
    assert cfg.api.page_size == 500
    assert cfg.sync.mode is SyncMode.INCREMENTAL
    assert cfg.sync.key_field == "Year"
    assert cfg.sync.protected_fields == frozenset({"Comment"})
    assert cfg.sync.settle_delay_seconds == 0.0
    assert cfg.extraction.command == ("node", "Docuparse.js")


def test_defaults_apply_for_omitted_settings(temp_workdir: Path):
    p = temp_workdir / "config" / "min.yml"
    p.write_text("sync:\n  mode: replace\n", encoding="utf-8")

    cfg = load_config(p)

    assert cfg.sync.mode is SyncMode.REPLACE
    assert cfg.sync.key_field == "Year"
    assert cfg.sync.display_column == "Name"
    assert cfg.sync.protect_key_column is True
    assert cfg.sync.settle_delay_seconds == 1.0
    assert cfg.api.url == DEFAULT_API_URL
    assert cfg.extraction.command == ()


def test_empty_file_is_all_defaults(temp_workdir: Path):
    p = temp_workdir / "config" / "empty.yml"
    p.write_text("", encoding="utf-8")
    assert load_config(p) == default_config()


def test_explicit_empty_protected_list_disables_protection(temp_workdir: Path):
    p = temp_workdir / "config" / "open.yml"
    p.write_text("sync:\n  protected_fields: []\n", encoding="utf-8")

    cfg = load_config(p)

    assert cfg.sync.protected_fields == frozenset()
    assert not cfg.sync.is_protected("Comment")


def test_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "nope.yml")


def test_invalid_yaml(temp_workdir: Path):
    p = temp_workdir / "config" / "bad.yml"
    p.write_text("sync: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(p)


def test_root_must_be_mapping(temp_workdir: Path):
    p = temp_workdir / "config" / "list.yml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="must be a mapping"):
        load_config(p)


@pytest.mark.parametrize(
    "content",
    [
        "unknown_section: {}\n",
        "sync:\n  mode: mirror\n",
        "sync:\n  colour: blue\n",
        "api:\n  page_size: 0\n",
        "api:\n  page_size: 501\n",
        "sync:\n  settle_delay_seconds: -1\n",
        "extraction:\n  command: node\n",
    ],
)
def test_schema_violations(temp_workdir: Path, content: str):
    p = temp_workdir / "config" / "invalid.yml"
    p.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(p)
