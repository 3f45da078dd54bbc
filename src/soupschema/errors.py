"""Exception types raised across soupschema."""

from __future__ import annotations

from typing import Sequence, Tuple


def format_path(path: Sequence[str]) -> str:
    return ".".join(path) if path else "<root>"


class SoupSchemaError(Exception):
    """Base class for every error raised by this package."""


class SchemaError(SoupSchemaError, ValueError):
    """A schema could not be turned into a compiled schema."""

    def __init__(self, message: str, path: Sequence[str] = ()) -> None:
        self.message = message
        self.path: Tuple[str, ...] = tuple(path)
        super().__init__(f"{format_path(self.path)}: {message}")


class SchemaFormatError(SchemaError):
    """The raw schema is structurally malformed or its text could not be decoded."""


class InvalidSchema(SchemaError):
    kind = "schema"

    def __init__(self, message: str, source: str, path: Sequence[str] = ()) -> None:
        self.source = source
        super().__init__(message, path)


class InvalidSelector(InvalidSchema):
    kind = "selector"


class InvalidRegex(InvalidSchema):
    kind = "regex"


class SerializationError(SoupSchemaError, ValueError):
    """An extraction result cannot be written in the requested format."""


class ConfigError(SoupSchemaError):
    pass


class FetchError(SoupSchemaError):
    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"failed to fetch {url}: {reason}")


class InvalidHandle(SoupSchemaError, KeyError):
    pass


__all__ = [
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
    "format_path",
]
