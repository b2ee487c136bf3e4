from dataclasses import dataclass
from typing import Iterator, List, Optional

from .values import Value


@dataclass(frozen=True)
class Symbol:
    """One binding of an identifier to a value."""
    identifier: str
    value: Value


class ScopeStack:
    """A single flat stack of bindings.

    Lookup finds the most recently pushed binding for an identifier, so
    shadowing, loop variables and function parameters all share one stack.
    Popping removes exactly the most recent binding.
    """
    def __init__(self):
        self.symbols: List[Symbol] = []

    @property
    def depth(self) -> int:
        return len(self.symbols)

    def push(self, symbol: Symbol) -> None:
        self.symbols.append(symbol)

    def pop(self) -> Symbol:
        return self.symbols.pop()

    def truncate(self, depth: int) -> None:
        """Drop every binding pushed after the stack had `depth` entries."""
        del self.symbols[depth:]

    def remove(self, identifier: str) -> bool:
        """Remove the innermost binding of `identifier`, wherever it sits."""
        for index in range(len(self.symbols) - 1, -1, -1):
            if self.symbols[index].identifier == identifier:
                del self.symbols[index]
                return True
        return False

    def lookup(self, identifier: str) -> Optional[Value]:
        for symbol in reversed(self.symbols):
            if symbol.identifier == identifier:
                return symbol.value
        return None

    def clear(self) -> None:
        self.symbols.clear()

    def __len__(self) -> int:
        return len(self.symbols)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self.symbols)
