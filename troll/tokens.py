"""Token definitions for the Troll scanner and parser."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Optional, Union


class TokenType(Enum):
    # Single-character tokens
    DIE = auto()
    ZERO_DIE = auto()
    UNION = auto()
    PLUS = auto()
    TIMES = auto()
    DIVIDE = auto()
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()
    SEMICOLON = auto()
    LBRACE = auto()
    RBRACE = auto()
    TILDE = auto()
    BANG = auto()
    AND = auto()
    HASH = auto()
    QUESTION = auto()
    SAMPLE = auto()
    LBRACK = auto()
    RBRACK = auto()

    # One or two character tokens
    MINUS = auto()
    SET_MINUS = auto()
    ASSIGN = auto()
    EQ = auto()
    NEQ = auto()
    LT = auto()
    GT = auto()
    LE = auto()
    GE = auto()
    DOT_DOT = auto()
    HCONC = auto()
    VCONCL = auto()
    VCONCR = auto()
    VCONCC = auto()
    FIRST = auto()
    SECOND = auto()

    # Literals
    INTEGER = auto()
    REAL = auto()
    IDENTIFIER = auto()
    STRING = auto()

    # Keywords
    SUM = auto()
    SGN = auto()
    MOD = auto()
    LEAST = auto()
    LARGEST = auto()
    COUNT = auto()
    DROP = auto()
    KEEP = auto()
    PICK = auto()
    MEDIAN = auto()
    IN = auto()
    REPEAT = auto()
    ACCUMULATE = auto()
    WHILE = auto()
    UNTIL = auto()
    FOREACH = auto()
    DO = auto()
    IF = auto()
    THEN = auto()
    ELSE = auto()
    MIN = auto()
    MAX = auto()
    MINIMAL = auto()
    MAXIMAL = auto()
    CHOOSE = auto()
    DIFFERENT = auto()
    FUNCTION = auto()
    CALL = auto()
    COMPOSITIONAL = auto()

    EOF = auto()


KEYWORDS: Dict[str, TokenType] = {
    'd': TokenType.DIE,
    'D': TokenType.DIE,
    'z': TokenType.ZERO_DIE,
    'Z': TokenType.ZERO_DIE,
    'U': TokenType.UNION,
    'sum': TokenType.SUM,
    'sgn': TokenType.SGN,
    'mod': TokenType.MOD,
    'least': TokenType.LEAST,
    'largest': TokenType.LARGEST,
    'count': TokenType.COUNT,
    'drop': TokenType.DROP,
    'keep': TokenType.KEEP,
    'pick': TokenType.PICK,
    'median': TokenType.MEDIAN,
    'in': TokenType.IN,
    'repeat': TokenType.REPEAT,
    'accumulate': TokenType.ACCUMULATE,
    'while': TokenType.WHILE,
    'until': TokenType.UNTIL,
    'foreach': TokenType.FOREACH,
    'do': TokenType.DO,
    'if': TokenType.IF,
    'then': TokenType.THEN,
    'else': TokenType.ELSE,
    'min': TokenType.MIN,
    'max': TokenType.MAX,
    'minimal': TokenType.MINIMAL,
    'maximal': TokenType.MAXIMAL,
    'choose': TokenType.CHOOSE,
    'different': TokenType.DIFFERENT,
    'function': TokenType.FUNCTION,
    'call': TokenType.CALL,
    'compositional': TokenType.COMPOSITIONAL,
}

# Spelling of each concatenation operator, shared by the scanner's string
# splitting and the layout routines.
CONCATENATION_OPERATORS: Dict[str, TokenType] = {
    '<>': TokenType.VCONCC,
    '<|': TokenType.VCONCR,
    '|>': TokenType.VCONCL,
    '||': TokenType.HCONC,
}


@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str
    literal: Optional[Union[int, float, str]] = None
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.type is TokenType.IDENTIFIER:
            return f"<{self.type.name}: {self.lexeme}>"
        if self.type in (TokenType.INTEGER, TokenType.REAL, TokenType.STRING):
            return f"<{self.literal}>"
        return f"<{self.type.name}>"
