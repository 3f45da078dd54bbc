"""Handle-based entry points for callers on the other side of a language boundary.

Compiled schemas and output buffers are handed out as opaque integer
handles. Each lives in its own table and must be released exactly once by
the caller (`release_opt` / `release_extract`); nothing here releases a
handle on the caller's behalf. Every failure is reported as
`RetCode.INVALID_ARGUMENTS`.

Text arguments are read like C strings: bytes up to the first NUL,
decoded as strict UTF-8.
"""

from __future__ import annotations

import itertools
import logging
import threading
from enum import IntEnum
from typing import Callable, Dict, Generic, Optional, Tuple, TypeVar

from .errors import InvalidHandle, SoupSchemaError
from .extraction import Extracted, extract_document as _extract_document, extract_fragment as _extract_fragment
from .formats import Format, dumps, loads, result_to_data
from .schema import CompiledSchemaNode, compile_schema

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetCode(IntEnum):
    SUCCESS = 0
    INVALID_ARGUMENTS = 1


class DescpType(IntEnum):
    JSON = 0
    TOML = 1
    YAML = 2

    @property
    def format(self) -> Format:
        return Format(self.name.lower())


class _ArgumentError(Exception):
    pass


class HandleTable(Generic[T]):
    """Single-owner registry mapping integer handles to objects."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._objects: Dict[int, T] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def add(self, obj: T) -> int:
        with self._lock:
            handle = next(self._ids)
            self._objects[handle] = obj
        return handle

    def get(self, handle: int) -> T:
        try:
            return self._objects[handle]
        except (KeyError, TypeError):
            raise InvalidHandle(f"unknown {self.kind} handle {handle!r}") from None

    def release(self, handle: int) -> None:
        with self._lock:
            if handle not in self._objects:
                raise InvalidHandle(f"{self.kind} handle {handle!r} is unknown or already released")
            del self._objects[handle]

    def __len__(self) -> int:
        return len(self._objects)


schemas: HandleTable[CompiledSchemaNode] = HandleTable("schema")
buffers: HandleTable[bytes] = HandleTable("extract")


def _read_c_string(data: Optional[bytes]) -> str:
    if data is None:
        raise _ArgumentError("null pointer")
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise _ArgumentError(f"expected bytes, got {type(data).__name__}")
    raw = bytes(data).split(b"\0", 1)[0]
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise _ArgumentError(f"invalid UTF-8: {exc}") from exc


def _descp_type(ty: int) -> DescpType:
    try:
        return DescpType(ty)
    except ValueError:
        raise _ArgumentError(f"unknown format tag {ty!r}") from None


def compile_opt(descp: Optional[bytes], ty: int) -> Tuple[RetCode, Optional[int]]:
    """Compile a schema description; on success return a schema handle."""
    try:
        text = _read_c_string(descp)
        compiled = compile_schema(loads(text, _descp_type(ty).format))
    except (_ArgumentError, SoupSchemaError) as exc:
        logger.warning("compile_opt rejected input: %s", exc)
        return RetCode.INVALID_ARGUMENTS, None
    return RetCode.SUCCESS, schemas.add(compiled)


def release_opt(handle: int) -> None:
    schemas.release(handle)


def _extract_to_buffer(
    source: Optional[bytes],
    handle: int,
    ty: int,
    run: Callable[[str, CompiledSchemaNode], Extracted],
) -> Tuple[RetCode, Optional[int]]:
    try:
        schema = schemas.get(handle)
        text = _read_c_string(source)
        fmt = _descp_type(ty).format
        output = dumps(result_to_data(run(text, schema)), fmt)
    except (_ArgumentError, SoupSchemaError) as exc:
        logger.warning("extraction rejected input: %s", exc)
        return RetCode.INVALID_ARGUMENTS, None
    return RetCode.SUCCESS, buffers.add(output.encode("utf-8") + b"\0")


def extract_fragment(fragment: Optional[bytes], handle: int, ty: int) -> Tuple[RetCode, Optional[int]]:
    return _extract_to_buffer(fragment, handle, ty, _extract_fragment)


def extract_document(document: Optional[bytes], handle: int, ty: int) -> Tuple[RetCode, Optional[int]]:
    return _extract_to_buffer(document, handle, ty, _extract_document)


def read_extract(handle: int) -> bytes:
    """Return the NUL-terminated output buffer behind `handle` without releasing it."""
    return buffers.get(handle)


def release_extract(handle: int) -> None:
    buffers.release(handle)


__all__ = [
    "RetCode",
    "DescpType",
    "HandleTable",
    "compile_opt",
    "release_opt",
    "extract_fragment",
    "extract_document",
    "read_extract",
    "release_extract",
]
