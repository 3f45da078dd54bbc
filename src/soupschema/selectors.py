"""Validation of CSS selectors and regex patterns into reusable matchers."""

from __future__ import annotations

import re
from typing import Pattern, Sequence

import soupsieve
from soupsieve import SoupSieve

from .errors import InvalidRegex, InvalidSelector


def compile_selector(text: str, path: Sequence[str] = ()) -> SoupSieve:
    """Compile a CSS selector, raising InvalidSelector instead of leaking soupsieve errors."""
    if not isinstance(text, str) or not text.strip():
        raise InvalidSelector("selector must be a non-empty string", source=str(text), path=path)
    try:
        return soupsieve.compile(text)
    except soupsieve.SelectorSyntaxError as exc:
        raise InvalidSelector(f"invalid selector {text!r}: {exc}", source=text, path=path) from exc
    except (ValueError, TypeError, NotImplementedError) as exc:
        raise InvalidSelector(f"unsupported selector {text!r}: {exc}", source=text, path=path) from exc


def compile_regex(text: str, path: Sequence[str] = ()) -> Pattern[str]:
    if not isinstance(text, str):
        raise InvalidRegex("regex must be a string", source=str(text), path=path)
    try:
        return re.compile(text)
    except re.error as exc:
        raise InvalidRegex(f"invalid regex {text!r}: {exc}", source=text, path=path) from exc


__all__ = ["compile_selector", "compile_regex"]
