from __future__ import annotations

import json

import jsonschema
import pytest
import yaml
from jsonschema.exceptions import ValidationError

from sheetboard.config.loader import SCHEMA_PATH

"""The shipped example config must satisfy the bundled schema."""

EXAMPLE_PATH = SCHEMA_PATH.parents[2] / "config" / "sync.example.yml"


@pytest.fixture()
def schema():
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_example_config_is_valid(schema):
    data = yaml.safe_load(EXAMPLE_PATH.read_text(encoding="utf-8"))
    jsonschema.validate(data, schema)


def test_schema_rejects_unknown_keys(schema):
    with pytest.raises(ValidationError):
        jsonschema.validate({"sync": {"key_field": "Year", "typo": True}}, schema)
