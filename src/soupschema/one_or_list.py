"""A value that is either a single item or a list of items."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class OneOrList(ABC, Generic[T]):
    """Abstract base of the two variants, `One` and `Many`.

    Collapsing rules:

    * `collapse`: 1 value -> `One`, anything else -> `Many` (possibly empty)
    * `collapse_optional`: 0 values -> `None`, 1 -> `One`, more -> `Many`
    """

    __slots__ = ()

    @staticmethod
    def from_raw(value: Any) -> "OneOrList[Any]":
        if isinstance(value, OneOrList):
            return value
        if isinstance(value, (list, tuple)):
            return Many(tuple(value))
        return One(value)

    @staticmethod
    def collapse(values: Iterable[T]) -> "OneOrList[T]":
        items = tuple(values)
        if len(items) == 1:
            return One(items[0])
        return Many(items)

    @staticmethod
    def collapse_optional(values: Iterable[T]) -> Optional["OneOrList[T]"]:
        items = tuple(values)
        if not items:
            return None
        return OneOrList.collapse(items)

    @abstractmethod
    def as_list(self) -> List[T]:
        ...

    @abstractmethod
    def map(self, fn: Callable[[T], U]) -> "OneOrList[U]":
        ...

    @abstractmethod
    def to_data(self, fn: Optional[Callable[[T], Any]] = None) -> Any:
        ...

    def is_empty(self) -> bool:
        return not self.as_list()

    def __iter__(self) -> Iterator[T]:
        return iter(self.as_list())

    def __len__(self) -> int:
        return len(self.as_list())


@dataclass(frozen=True)
class One(OneOrList[T]):
    value: T

    def as_list(self) -> List[T]:
        return [self.value]

    def map(self, fn: Callable[[T], U]) -> "One[U]":
        return One(fn(self.value))

    def to_data(self, fn: Optional[Callable[[T], Any]] = None) -> Any:
        return fn(self.value) if fn else self.value


@dataclass(frozen=True)
class Many(OneOrList[T]):
    values: Tuple[T, ...] = ()

    def __post_init__(self) -> None:
        # normalize lists and generators to a tuple
        if not isinstance(self.values, tuple):
            object.__setattr__(self, "values", tuple(self.values))

    def as_list(self) -> List[T]:
        return list(self.values)

    def map(self, fn: Callable[[T], U]) -> "Many[U]":
        return Many(tuple(fn(v) for v in self.values))

    def to_data(self, fn: Optional[Callable[[T], Any]] = None) -> Any:
        if fn:
            return [fn(v) for v in self.values]
        return list(self.values)


__all__ = ["OneOrList", "One", "Many"]
