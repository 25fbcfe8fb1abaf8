from __future__ import annotations

import json

import jsonschema
import pytest
import yaml

from asset_import.config.loader import SCHEMA_PATH

"""Contract: the bundled schema accepts the shipped sample config and rejects drift."""


@pytest.fixture()
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_sample_config_is_valid(schema, sample_config_yaml: str):
    jsonschema.validate(yaml.safe_load(sample_config_yaml), schema)


def test_tables_required(schema):
    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate({"mode": "clear"}, schema)


def test_all_asset_types_required_in_tables(schema):
    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate({"tables": {"software": "s", "cyber": "c"}}, schema)


@pytest.mark.parametrize("table", ["drop table;", "1abc", "a-b", ""])
def test_table_names_must_be_identifiers(schema, table: str):
    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate({"tables": {"software": table, "cyber": "c", "data_content": "d"}}, schema)


def test_category_map_values_must_be_strings(schema):
    doc = {
        "tables": {"software": "s", "cyber": "c", "data_content": "d"},
        "category_maps": {"software": {"X1": 1}},
    }
    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate(doc, schema)


def test_unknown_asset_type_in_category_maps(schema):
    doc = {
        "tables": {"software": "s", "cyber": "c", "data_content": "d"},
        "category_maps": {"hardware": {"X1": "Y"}},
    }
    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate(doc, schema)
