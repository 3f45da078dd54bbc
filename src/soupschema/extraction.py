"""Recursive extraction of values from parsed HTML guided by a compiled schema."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from bs4 import BeautifulSoup, Tag
from bs4.dammit import EntitySubstitution
from bs4.element import NavigableString, PreformattedString
from bs4.formatter import HTMLFormatter

from .one_or_list import OneOrList
from .schema import CompiledSchemaNode

logger = logging.getLogger(__name__)

TARGET_TEXT = "text"
TARGET_HTML = "html"
TARGET_INNER_HTML = "inner_html"

# void elements written as <br>, text escaped like the default "minimal" formatter
HTML_FORMATTER = HTMLFormatter(entity_substitution=EntitySubstitution.substitute_xml, void_element_close_prefix=None)


@dataclass
class ExtractedItem:
    """What one schema node extracted from one matched element.

    `text` is None when no target produced a value; `items` holds one entry
    per child field of the schema node.
    """

    text: Optional[OneOrList[str]] = None
    items: Dict[str, "Extracted"] = field(default_factory=dict)


Extracted = OneOrList[ExtractedItem]


def parse_document(text: str) -> BeautifulSoup:
    return BeautifulSoup(text, "lxml", multi_valued_attributes=None)


def parse_fragment(text: str) -> BeautifulSoup:
    return BeautifulSoup(text, "html.parser", multi_valued_attributes=None)


def text_content(element: Tag) -> str:
    """All descendant text nodes joined without a separator.

    Unlike `get_text`, this keeps script, style, template and ruby text;
    comments, doctypes and processing instructions are left out.
    """
    return "".join(
        s for s in element.descendants if isinstance(s, NavigableString) and not isinstance(s, PreformattedString)
    )


def _resolve_target(element: Tag, target: str) -> Optional[str]:
    if target == TARGET_TEXT:
        return text_content(element)
    if target == TARGET_HTML:
        return element.decode(formatter=HTML_FORMATTER)
    if target == TARGET_INNER_HTML:
        return element.decode_contents(formatter=HTML_FORMATTER)
    value = element.get(target)
    if value is None:
        return None
    # multi-valued attributes are disabled at parse time, but trees built elsewhere may still carry lists
    if isinstance(value, list):
        return " ".join(value)
    return value


def _contributions(raw: str, schema: CompiledSchemaNode) -> Iterator[str]:
    trimmed = raw.strip()
    if schema.regex is None:
        yield trimmed
        return
    match = schema.regex.search(trimmed)
    if match is None:
        return
    for group in match.groups():
        if group is not None:
            yield group


def extract_text(element: Tag, schema: CompiledSchemaNode) -> Optional[OneOrList[str]]:
    values: List[str] = []
    for target in schema.target:
        raw = _resolve_target(element, target)
        if raw is None:
            continue
        values.extend(_contributions(raw, schema))
    return OneOrList.collapse_optional(values)


def extract(scope: Tag, schema: CompiledSchemaNode) -> Extracted:
    """Apply `schema` to the descendants of `scope`.

    One matched element gives a `One`, zero or several give a `Many` in
    document order. Never raises for a compiled schema.
    """
    matched = schema.selector.select(scope)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Selector %r at %s matched %d element(s)", schema.selector_text, ".".join(schema.path) or "<root>", len(matched))
    extracted: List[ExtractedItem] = []
    for element in matched:
        items = {name: extract(element, child) for name, child in schema.items.items()}
        extracted.append(ExtractedItem(text=extract_text(element, schema), items=items))
    return OneOrList.collapse(extracted)


def extract_document(document: str, schema: CompiledSchemaNode) -> Extracted:
    return extract(parse_document(document), schema)


def extract_fragment(fragment: str, schema: CompiledSchemaNode) -> Extracted:
    return extract(parse_fragment(fragment), schema)


__all__ = [
    "ExtractedItem",
    "Extracted",
    "parse_document",
    "parse_fragment",
    "extract",
    "extract_text",
    "text_content",
    "extract_document",
    "extract_fragment",
]
