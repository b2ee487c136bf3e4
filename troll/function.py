from dataclasses import dataclass
from typing import Tuple

from .ast import Expr


@dataclass(frozen=True)
class FunctionDefinition:
    identifier: str
    parameters: Tuple[str, ...]
    body: Expr

    @property
    def arity(self) -> int:
        return len(self.parameters)

    def __str__(self) -> str:
        return f"<function {self.identifier}({', '.join(self.parameters)}) = {self.body}>"
