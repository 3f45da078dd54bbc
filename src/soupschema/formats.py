"""Schema text loading and result serialization for JSON, TOML and YAML."""

from __future__ import annotations

import json
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping

import tomli_w
import yaml

from .errors import SchemaFormatError, SerializationError
from .extraction import Extracted, ExtractedItem
from .schema import TEXT_KEY, CompiledSchemaNode, compile_schema


class Format(str, Enum):
    JSON = "json"
    TOML = "toml"
    YAML = "yaml"

    @classmethod
    def from_suffix(cls, path: Path | str) -> "Format":
        suffix = Path(path).suffix.lower().lstrip(".")
        if suffix == "yml":
            suffix = "yaml"
        try:
            return cls(suffix)
        except ValueError:
            raise ValueError(f"cannot infer format from {str(path)!r}; expected .json, .toml, .yaml or .yml") from None


def loads(text: str, fmt: Format | str) -> Dict[str, Any]:
    """Decode schema or job text into a plain mapping."""
    fmt = Format(fmt)
    try:
        if fmt is Format.JSON:
            data = json.loads(text)
        elif fmt is Format.TOML:
            data = tomllib.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        raise SchemaFormatError(f"invalid {fmt.value} document: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise SchemaFormatError(f"top level of a {fmt.value} schema must be a mapping")
    return dict(data)


def load_schema(text: str, fmt: Format | str) -> CompiledSchemaNode:
    return compile_schema(loads(text, fmt))


def item_to_data(item: ExtractedItem, omit_empty: bool = True) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if item.text is not None:
        data[TEXT_KEY] = item.text.to_data()
    for name, result in item.items.items():
        if omit_empty and result.is_empty():
            continue
        data[name] = result_to_data(result, omit_empty=omit_empty)
    return data


def result_to_data(result: Extracted, omit_empty: bool = True) -> Any:
    """Plain dict/list view of a result: a dict for one match, a list otherwise."""
    return result.to_data(lambda item: item_to_data(item, omit_empty=omit_empty))


def dumps(data: Any, fmt: Format | str) -> str:
    fmt = Format(fmt)
    if fmt is Format.JSON:
        return json.dumps(data, ensure_ascii=False, indent=2)
    if fmt is Format.TOML:
        if not isinstance(data, Mapping):
            raise SerializationError("TOML output needs a table at the top level; this result is a list")
        try:
            return tomli_w.dumps(data)
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"cannot write result as TOML: {exc}") from exc
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


__all__ = ["Format", "loads", "load_schema", "item_to_data", "result_to_data", "dumps"]
