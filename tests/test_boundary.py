import json
import tomllib

import pytest

from soupschema import boundary
from soupschema.boundary import DescpType, RetCode
from soupschema.errors import InvalidHandle

SCHEMA_JSON = b'{"selector": "a", "target": "href"}\0'
SCHEMA_TOML = b'selector = ".parent"\n\n[title]\nselector = "h2"\ntarget = "text"\n\0'


def test_compile_extract_release():
    code, handle = boundary.compile_opt(SCHEMA_JSON, DescpType.JSON)
    assert code is RetCode.SUCCESS
    code, buf = boundary.extract_fragment(b'<a href="www.xxx.com">\0', handle, DescpType.JSON)
    assert code is RetCode.SUCCESS
    # the output buffer outlives the schema handle
    boundary.release_opt(handle)
    out = boundary.read_extract(buf)
    assert out.endswith(b"\0")
    assert json.loads(out[:-1]) == {"text": "www.xxx.com"}
    boundary.release_extract(buf)


def test_toml_document_extraction():
    code, handle = boundary.compile_opt(SCHEMA_TOML, DescpType.TOML)
    assert code is RetCode.SUCCESS
    html = b'<div class="parent"><h2>w</h2><h2>r</h2></div>'
    code, buf = boundary.extract_document(html, handle, DescpType.TOML)
    assert code is RetCode.SUCCESS
    assert tomllib.loads(boundary.read_extract(buf)[:-1].decode()) == {"title": [{"text": "w"}, {"text": "r"}]}
    boundary.release_extract(buf)
    boundary.release_opt(handle)


@pytest.mark.parametrize(
    "descp,ty",
    [
        (None, DescpType.JSON),
        (b"\xff\xfe{}", DescpType.JSON),
        (b"not json", DescpType.JSON),
        (b'{"selector": "a["}', DescpType.JSON),
        (b'selector = "a"\nregex = "("\n', DescpType.TOML),
        (SCHEMA_JSON, 9),
    ],
)
def test_compile_failures_collapse_to_invalid_arguments(descp, ty):
    assert boundary.compile_opt(descp, ty) == (RetCode.INVALID_ARGUMENTS, None)


def test_extract_failures():
    code, handle = boundary.compile_opt(SCHEMA_JSON, DescpType.JSON)
    # two matches produce a list, which TOML cannot hold at the top level
    assert boundary.extract_fragment(b'<a href="1"></a><a href="2"></a>', handle, DescpType.TOML) == (
        RetCode.INVALID_ARGUMENTS,
        None,
    )
    assert boundary.extract_fragment(b"\xc3\x28", handle, DescpType.JSON)[0] is RetCode.INVALID_ARGUMENTS
    boundary.release_opt(handle)
    assert boundary.extract_fragment(b"<a href='x'>", handle, DescpType.JSON)[0] is RetCode.INVALID_ARGUMENTS


def test_double_release_raises():
    _, handle = boundary.compile_opt(SCHEMA_JSON, DescpType.YAML)
    boundary.release_opt(handle)
    with pytest.raises(InvalidHandle):
        boundary.release_opt(handle)
    with pytest.raises(InvalidHandle):
        boundary.release_extract(12345678)
