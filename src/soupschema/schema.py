"""Extraction schema model and the compiler that validates it.

A schema node is written in a flattened form::

    selector = ".product"
    target = ["href", "text"]   # or `label`; optional
    regex = "price: (\\d+)"     # optional

    [title]                    # any other key is a child field
    selector = "h2"
    target = "text"

`RawSchemaNode` keeps the reserved keys and the named children apart;
`compile_schema` turns it into a `CompiledSchemaNode` whose selectors and
regexes are parsed once and can be reused across documents and threads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Pattern, Sequence, Tuple, Union

from soupsieve import SoupSieve

from .errors import SchemaFormatError
from .one_or_list import Many, OneOrList
from .selectors import compile_regex, compile_selector

logger = logging.getLogger(__name__)

SELECTOR_KEY = "selector"
TARGET_KEYS = ("target", "label")
REGEX_KEY = "regex"
RESERVED_KEYS = frozenset({SELECTOR_KEY, REGEX_KEY, *TARGET_KEYS})

# output key holding the extracted text of a node
TEXT_KEY = "text"


@dataclass
class RawSchemaNode:
    selector: str
    target: OneOrList[str] = field(default_factory=Many)
    regex: Optional[str] = None
    items: Dict[str, "RawSchemaNode"] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, path: Sequence[str] = ()) -> "RawSchemaNode":
        if not isinstance(data, Mapping):
            raise SchemaFormatError(f"schema node must be a mapping, got {type(data).__name__}", path)

        selector = data.get(SELECTOR_KEY)
        if not isinstance(selector, str) or not selector.strip():
            raise SchemaFormatError("'selector' is required and must be a non-empty string", path)

        given = [k for k in TARGET_KEYS if k in data]
        if len(given) > 1:
            raise SchemaFormatError("'target' and 'label' are aliases; give only one", path)
        target: OneOrList[str] = Many()
        if given:
            target = OneOrList.from_raw(data[given[0]])
            if not all(isinstance(t, str) for t in target):
                raise SchemaFormatError("'target' must be a string or a list of strings", path)

        regex = data.get(REGEX_KEY)
        if regex is not None and not isinstance(regex, str):
            raise SchemaFormatError("'regex' must be a string", path)

        items: Dict[str, RawSchemaNode] = {}
        for key, value in data.items():
            if key in RESERVED_KEYS:
                continue
            child_path = (*path, str(key))
            if not isinstance(key, str):
                raise SchemaFormatError("field names must be strings", child_path)
            if key == TEXT_KEY:
                raise SchemaFormatError(f"field name {TEXT_KEY!r} is reserved for extracted text", child_path)
            if not isinstance(value, Mapping):
                raise SchemaFormatError(
                    f"unknown key {key!r}: child fields must be mappings, got {type(value).__name__}", child_path
                )
            items[key] = cls.from_dict(value, child_path)

        return cls(selector=selector, target=target, regex=regex, items=items)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {SELECTOR_KEY: self.selector}
        if not self.target.is_empty():
            data["target"] = self.target.to_data()
        if self.regex is not None:
            data[REGEX_KEY] = self.regex
        for name, child in self.items.items():
            data[name] = child.to_dict()
        return data


@dataclass(frozen=True)
class CompiledSchemaNode:
    target: Tuple[str, ...]
    selector: SoupSieve
    regex: Optional[Pattern[str]]
    items: Mapping[str, "CompiledSchemaNode"]
    selector_text: str = ""
    path: Tuple[str, ...] = ()

    def node_count(self) -> int:
        return 1 + sum(child.node_count() for child in self.items.values())


def _compile_node(raw: RawSchemaNode, path: Tuple[str, ...]) -> CompiledSchemaNode:
    selector = compile_selector(raw.selector, path)
    regex = compile_regex(raw.regex, path) if raw.regex is not None else None
    items = {name: _compile_node(child, (*path, name)) for name, child in raw.items.items()}
    return CompiledSchemaNode(
        target=tuple(raw.target.as_list()),
        selector=selector,
        regex=regex,
        items=MappingProxyType(items),
        selector_text=raw.selector,
        path=path,
    )


def compile_schema(raw: Union[RawSchemaNode, Mapping[str, Any]]) -> CompiledSchemaNode:
    """Compile a schema tree; the first invalid selector or regex aborts the whole compile."""
    if not isinstance(raw, RawSchemaNode):
        raw = RawSchemaNode.from_dict(raw)
    compiled = _compile_node(raw, ())
    logger.debug("Compiled schema %r with %d nodes", raw.selector, compiled.node_count())
    return compiled


__all__ = [
    "RawSchemaNode",
    "CompiledSchemaNode",
    "compile_schema",
    "RESERVED_KEYS",
    "TEXT_KEY",
]
