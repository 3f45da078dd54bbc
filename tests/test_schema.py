import pytest

from soupschema.errors import InvalidRegex, InvalidSelector, SchemaFormatError
from soupschema.one_or_list import Many, One
from soupschema.schema import RawSchemaNode, compile_schema


def test_compile_nested_schema():
    compiled = compile_schema(
        {
            "selector": ".product",
            "target": ["href", "text"],
            "name": {"selector": "h2", "label": "text"},
            "price": {"selector": ".price", "target": "text", "regex": r"(\d+)"},
        }
    )
    assert compiled.target == ("href", "text")
    assert set(compiled.items) == {"name", "price"}
    assert compiled.items["name"].target == ("text",)
    assert compiled.items["price"].regex.pattern == r"(\d+)"
    assert compiled.items["price"].path == ("price",)
    assert compiled.node_count() == 3


def test_compiled_items_are_read_only():
    compiled = compile_schema({"selector": "div", "child": {"selector": "p"}})
    with pytest.raises(TypeError):
        compiled.items["other"] = compiled


def test_target_defaults_to_empty():
    raw = RawSchemaNode.from_dict({"selector": "div"})
    assert raw.target == Many(())
    assert compile_schema(raw).target == ()


def test_invalid_selector_fails_whole_compile():
    schema = {"selector": "div", "ok": {"selector": "p"}, "bad": {"selector": "a[", "target": "text"}}
    with pytest.raises(InvalidSelector) as info:
        compile_schema(schema)
    assert info.value.kind == "selector"
    assert info.value.path == ("bad",)


def test_invalid_regex_reports_path():
    schema = {"selector": "div", "outer": {"selector": "p", "inner": {"selector": "b", "regex": "(unclosed"}}}
    with pytest.raises(InvalidRegex) as info:
        compile_schema(schema)
    assert info.value.path == ("outer", "inner")
    assert "outer.inner" in str(info.value)


@pytest.mark.parametrize(
    "data",
    [
        {"target": "text"},
        {"selector": ""},
        {"selector": 3},
        {"selector": "a", "target": "text", "label": "href"},
        {"selector": "a", "target": ["text", 1]},
        {"selector": "a", "regex": 5},
        {"selector": "a", "title": "h2"},
        {"selector": "a", "text": {"selector": "b"}},
        ["selector", "a"],
    ],
)
def test_malformed_raw_schema(data):
    with pytest.raises(SchemaFormatError):
        RawSchemaNode.from_dict(data)


def test_to_dict_flattens_children():
    data = {"selector": "div", "target": "text", "regex": "(a)", "child": {"selector": "p", "target": ["href", "text"]}}
    raw = RawSchemaNode.from_dict(data)
    assert raw.target == One("text")
    assert raw.items["child"].target == Many(("href", "text"))
    assert raw.to_dict() == data
