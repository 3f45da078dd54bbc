"""Declarative HTML data extraction driven by nested CSS-selector schemas."""

from .errors import (
    ConfigError,
    FetchError,
    InvalidHandle,
    InvalidRegex,
    InvalidSchema,
    InvalidSelector,
    SchemaError,
    SchemaFormatError,
    SerializationError,
    SoupSchemaError,
)
from .extraction import (
    Extracted,
    ExtractedItem,
    extract,
    extract_document,
    extract_fragment,
    parse_document,
    parse_fragment,
)
from .formats import Format, dumps, load_schema, loads, result_to_data
from .one_or_list import Many, One, OneOrList
from .schema import CompiledSchemaNode, RawSchemaNode, compile_schema
from .selectors import compile_regex, compile_selector

__all__ = [
    "OneOrList",
    "One",
    "Many",
    "RawSchemaNode",
    "CompiledSchemaNode",
    "compile_schema",
    "compile_selector",
    "compile_regex",
    "Extracted",
    "ExtractedItem",
    "extract",
    "extract_document",
    "extract_fragment",
    "parse_document",
    "parse_fragment",
    "Format",
    "loads",
    "dumps",
    "load_schema",
    "result_to_data",
    "SoupSchemaError",
    "SchemaError",
    "SchemaFormatError",
    "InvalidSchema",
    "InvalidSelector",
    "InvalidRegex",
    "SerializationError",
    "ConfigError",
    "FetchError",
    "InvalidHandle",
]

__version__ = "0.1.0"
