"""Abstract Syntax Tree (AST) definitions for the Troll language.

Nodes are immutable once parsed. Every node exposes `evaluate(interpreter)`,
which hands the node back to the interpreter's dispatcher. Binary and unary
nodes carry an operand schema chosen by the parser from the operator token;
the evaluator dispatches on that schema and validates operand shapes once.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple

from .tokens import Token, TokenType
from .values import Value

if TYPE_CHECKING:
    from .interpreter import Interpreter


class BinarySchema(Enum):
    COLLECTION_COLLECTION = 'collection-collection'
    COLLECTION_SINGLETON = 'collection-singleton'
    SINGLETON_COLLECTION = 'singleton-collection'
    SINGLETON_SINGLETON = 'singleton-singleton'
    STRING_STRING = 'string-string'
    DEFERRED = 'deferred'


class UnarySchema(Enum):
    COLLECTION = 'collection'
    SINGLETON = 'singleton'
    REAL = 'real'
    TUPLE = 'tuple'
    DEFERRED = 'deferred'


class EndStyle(Enum):
    UNTIL = 'until'
    WHILE = 'while'

    @classmethod
    def for_token(cls, token_type: TokenType) -> Optional['EndStyle']:
        if token_type is TokenType.UNTIL:
            return cls.UNTIL
        if token_type is TokenType.WHILE:
            return cls.WHILE
        return None


class Expr:
    """Base class for all expression nodes."""

    def evaluate(self, interpreter: 'Interpreter') -> Value:
        return interpreter.evaluate_node(self)


def parenthesize(name: str, *exprs: Expr) -> str:
    return f"({name} " + ' '.join(str(e) for e in exprs) + ")"


@dataclass(frozen=True)
class Literal(Expr):
    value: Value

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Variable(Expr):
    identifier: str
    default: Optional[Expr] = None

    def __str__(self) -> str:
        if self.default is None:
            return self.identifier
        return parenthesize('~', Variable(self.identifier), self.default)


@dataclass(frozen=True)
class Binary(Expr):
    left: Expr
    op: Token
    schema: BinarySchema
    right: Expr

    def __str__(self) -> str:
        return parenthesize(self.op.lexeme, self.left, self.right)


@dataclass(frozen=True)
class Unary(Expr):
    op: Token
    schema: UnarySchema
    right: Expr

    def __str__(self) -> str:
        return parenthesize(self.op.lexeme, self.right)


@dataclass(frozen=True)
class If(Expr):
    condition: Expr
    then_branch: Expr
    else_branch: Expr

    def __str__(self) -> str:
        return parenthesize('if', self.condition, self.then_branch, self.else_branch)


@dataclass(frozen=True)
class Foreach(Expr):
    identifier: str
    source: Expr
    body: Expr

    def __str__(self) -> str:
        return f"<Foreach {self.identifier} in {self.source} do {self.body}>"


@dataclass(frozen=True)
class Repeat(Expr):
    identifier: str
    expr: Expr
    end_style: EndStyle
    test: Expr

    def __str__(self) -> str:
        return f"<Repeat {self.identifier} := {self.expr} {self.end_style.value} {self.test}>"


@dataclass(frozen=True)
class Accumulate(Expr):
    identifier: str
    expr: Expr
    end_style: EndStyle
    test: Expr

    def __str__(self) -> str:
        return f"<Accumulate {self.identifier} := {self.expr} {self.end_style.value} {self.test}>"


@dataclass(frozen=True)
class Binding(Expr):
    identifier: str
    definition: Expr
    use: Expr

    def __str__(self) -> str:
        return f"<Binding {self.identifier} := {self.definition}; {self.use}>"


@dataclass(frozen=True)
class FunctionCall(Expr):
    identifier: str
    arguments: Tuple[Expr, ...] = ()

    def __str__(self) -> str:
        return parenthesize(f"Call: {self.identifier}", *self.arguments)


@dataclass(frozen=True)
class CollectionLiteral(Expr):
    elements: Tuple[Expr, ...] = ()

    def __str__(self) -> str:
        return '{' + ', '.join(str(e) for e in self.elements) + '}'


@dataclass(frozen=True)
class TupleLiteral(Expr):
    first: Expr
    second: Expr

    def __str__(self) -> str:
        return f"[{self.first}, {self.second}]"


@dataclass(frozen=True)
class Group(Expr):
    expr: Expr

    def __str__(self) -> str:
        return parenthesize('group', self.expr)
