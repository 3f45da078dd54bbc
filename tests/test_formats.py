import json
import tomllib

import pytest
import yaml

from soupschema.errors import SchemaFormatError, SerializationError
from soupschema.formats import Format, dumps, load_schema, loads


def test_loads_each_format():
    expected = {"selector": "a", "target": "href"}
    assert loads('{"selector": "a", "target": "href"}', Format.JSON) == expected
    assert loads('selector = "a"\ntarget = "href"\n', "toml") == expected
    assert loads("selector: a\ntarget: href\n", Format.YAML) == expected


@pytest.mark.parametrize("text,fmt", [("{", "json"), ("selector = ", "toml"), ("- a\n- b\n", "yaml")])
def test_loads_rejects_bad_text(text, fmt):
    with pytest.raises(SchemaFormatError):
        loads(text, fmt)


def test_load_schema_compiles_toml():
    schema = load_schema('selector = ".parent"\n\n[title]\nselector = "h2"\ntarget = "text"\n', Format.TOML)
    assert list(schema.items) == ["title"]


def test_format_from_suffix():
    assert Format.from_suffix("job.yml") is Format.YAML
    assert Format.from_suffix("schema.TOML") is Format.TOML
    with pytest.raises(ValueError):
        Format.from_suffix("schema.ini")


def test_dumps_toml_array_of_tables():
    data = {"title": [{"text": "w"}, {"text": "r"}]}
    out = dumps(data, Format.TOML)
    assert "[[title]]" in out
    assert tomllib.loads(out) == data


def test_dumps_toml_needs_table():
    with pytest.raises(SerializationError):
        dumps([{"text": "a"}, {"text": "b"}], Format.TOML)


def test_dumps_json_and_yaml_keep_order():
    data = {"zeta": {"text": "z"}, "alpha": {"text": "ä"}}
    assert json.loads(dumps(data, Format.JSON)) == data
    out = dumps(data, Format.YAML)
    assert out.index("zeta") < out.index("alpha")
    assert yaml.safe_load(out) == data
