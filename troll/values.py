"""Runtime values for Troll.

There are exactly four shapes of value:

* `Collection` - a multiset of integers. Order is irrelevant for equality
  but duplicates count. A one-element collection is the only way to
  represent a scalar integer.
* `Real` - a probability, produced only by ``0.ddd`` literals.
* `Text` - possibly multi-line text, treated as a rectangular box by the
  layout operators.
* `Pair` - a two-slot tuple of values.

No equality holds across shapes, and only collections have a truth value
(non-empty means true).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple


class Value:
    """Base class for all runtime values."""

    @property
    def is_truthy(self) -> bool:
        return False

    @property
    def is_falsey(self) -> bool:
        return not self.is_truthy


@dataclass(frozen=True, eq=False)
class Collection(Value):
    values: Tuple[int, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'values', tuple(self.values))

    @classmethod
    def of(cls, *values: int) -> 'Collection':
        return cls(values)

    @property
    def integer(self) -> Optional[int]:
        """The scalar held by a singleton collection, else None."""
        if len(self.values) == 1:
            return self.values[0]
        return None

    @property
    def is_truthy(self) -> bool:
        return len(self.values) > 0

    def sorted(self) -> List[int]:
        return sorted(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[int]:
        return iter(self.values)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Collection):
            return False
        return sorted(self.values) == sorted(other.values)

    def __hash__(self) -> int:
        return hash(('Collection', tuple(sorted(self.values))))

    def __str__(self) -> str:
        if len(self.values) == 1:
            return str(self.values[0])
        return ' '.join(str(v) for v in sorted(self.values))


@dataclass(frozen=True)
class Real(Value):
    value: float

    def __str__(self) -> str:
        return f"?{self.value}"


@dataclass(frozen=True)
class Text(Value):
    value: str

    @property
    def lines(self) -> List[str]:
        return lines(self.value)

    @property
    def width(self) -> int:
        return width(self.value)

    @property
    def height(self) -> int:
        return height(self.value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Pair(Value):
    first: Value
    second: Value

    def __str__(self) -> str:
        return f"[ {self.first}, {self.second} ]"


# Text box helpers

def lines(text: str) -> List[str]:
    return text.split('\n')


def width(text: str) -> int:
    return max(len(line) for line in lines(text))


def height(text: str) -> int:
    return len(lines(text))


def type_name(value: Value) -> str:
    """Return the user-facing name of a value's shape."""
    if isinstance(value, Collection):
        if value.integer is not None:
            return 'singleton'
        return 'collection'
    if isinstance(value, Real):
        return 'real'
    if isinstance(value, Text):
        return 'text'
    if isinstance(value, Pair):
        return 'pair'
    return type(value).__name__

