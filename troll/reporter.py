"""Error reporters.

The scanner, parser and interpreter describe every problem they detect to a
reporter in addition to returning a structured error. A reporter is any
object with a ``report(line, column, message)`` method; a position of
``-1, -1`` means a runtime error with no source position.
"""

from __future__ import annotations

import sys
from typing import List, Optional, TextIO, Tuple


class ConsoleErrorReporter:
    """Writes diagnostics to stderr (or another text stream)."""
    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def report(self, line: int, column: int, message: str) -> None:
        stream = self.stream if self.stream is not None else sys.stderr
        if line < 0:
            print(f"Error: {message}", file=stream)
        else:
            print(f"[line {line}, column {column}] Error: {message}", file=stream)


class CollectingErrorReporter:
    """Keeps every diagnostic in memory."""
    def __init__(self):
        self.errors: List[Tuple[int, int, str]] = []

    def report(self, line: int, column: int, message: str) -> None:
        self.errors.append((line, column, message))

    @property
    def messages(self) -> List[str]:
        return [message for _, _, message in self.errors]

    def clear(self) -> None:
        self.errors.clear()
