"""Scanner for the Troll language.

The scanner turns source text into a list of `Token`s ending with an EOF
token. Besides the usual operators, keywords and literals it does one
unusual thing: the four text concatenation operators (``<>``, ``|>``, ``<|``
and ``||``) are recognised *inside* string literals and split out as
operator tokens, so ``"a<>b"`` scans exactly like ``"a" <> "b"``.
Parentheses inside a string are ordinary characters.

Scanning stops at the first problem. The problem is described to the
reporter and returned as an `Err` holding a `ScannerError`.
"""

from __future__ import annotations

import re
from typing import List, Optional, Union

from .errors import ScannerError, TrollError
from .reporter import ConsoleErrorReporter
from .result import Err, Ok, Result
from .tokens import CONCATENATION_OPERATORS, KEYWORDS, Token, TokenType

_CONCATENATION_PATTERN = re.compile(r'(<>|\|>|<\||\|\|)')

SINGLE_CHARACTER_TOKENS = {
    '+': TokenType.PLUS,
    '*': TokenType.TIMES,
    '/': TokenType.DIVIDE,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    ',': TokenType.COMMA,
    ';': TokenType.SEMICOLON,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    '@': TokenType.UNION,
    '&': TokenType.AND,
    '#': TokenType.HASH,
    '?': TokenType.QUESTION,
    "'": TokenType.SAMPLE,
    '[': TokenType.LBRACK,
    ']': TokenType.RBRACK,
    '~': TokenType.TILDE,
    '!': TokenType.BANG,
}


def extract_concatenation_operators(text: str) -> List[str]:
    """Split text around concatenation operators, keeping the operators.

    Empty pieces are kept, so ``"<>"`` becomes ``['', '<>', '']``.
    """
    return _CONCATENATION_PATTERN.split(text)


def _is_digit(c: str) -> bool:
    return '0' <= c <= '9'


class Scanner:
    def __init__(self, source: str, reporter=None):
        self.source = source
        self.reporter = reporter if reporter is not None else ConsoleErrorReporter()
        self.tokens: List[Token] = []
        self.start = 0
        self.current = 0
        self.line = 1
        self.column = 1
        self.start_line = 1
        self.start_column = 1

    def scan(self) -> Result:
        try:
            if not self.source:
                self.error(ScannerError.NO_SOURCE, "No source to scan.")
            while not self.at_end():
                self.start = self.current
                self.start_line = self.line
                self.start_column = self.column
                self.scan_token()
        except TrollError as ex:
            return Err(ex.kind)
        self.tokens.append(Token(TokenType.EOF, '', None, self.line, self.column))
        return Ok(self.tokens)

    def scan_token(self) -> None:
        c = self.advance()

        if c in SINGLE_CHARACTER_TOKENS:
            self.add_token(SINGLE_CHARACTER_TOKENS[c])
        elif c == ':':
            if not self.match('='):
                self.malformed("':' must be followed by '='")
            self.add_token(TokenType.ASSIGN)
        elif c == '-':
            self.add_token(TokenType.SET_MINUS if self.match('-') else TokenType.MINUS)
        elif c == '>':
            self.add_token(TokenType.GE if self.match('=') else TokenType.GT)
        elif c == '<':
            if self.match('='):
                self.add_token(TokenType.LE)
            elif self.match('>'):
                self.add_token(TokenType.VCONCC)
            elif self.match('|'):
                self.add_token(TokenType.VCONCR)
            else:
                self.add_token(TokenType.LT)
        elif c == '|':
            if self.match('|'):
                self.add_token(TokenType.HCONC)
            elif self.match('>'):
                self.add_token(TokenType.VCONCL)
            else:
                self.malformed("'|' must be followed by either '|' or '>'")
        elif c == '%':
            if self.match('1'):
                self.add_token(TokenType.FIRST)
            elif self.match('2'):
                self.add_token(TokenType.SECOND)
            else:
                self.malformed("'%' must be followed by either '1' or '2'")
        elif c == '=':
            if self.match('/'):
                if not self.match('='):
                    self.malformed("'=/' must be followed by '='")
                self.add_token(TokenType.NEQ)
            else:
                self.add_token(TokenType.EQ)
        elif c == '.':
            if not self.match('.'):
                self.malformed("'.' must be followed by '.'")
            self.add_token(TokenType.DOT_DOT)
        elif c == '"':
            self.string()
        elif c == '\\':
            # comment to end of line
            while self.peek() != '\n' and not self.at_end():
                self.advance()
        elif c in ' \r\t\n':
            pass
        elif c == '0':
            self.real_or_zero()
        elif _is_digit(c):
            self.integer()
        elif c.isalpha():
            self.identifier()
        else:
            self.error(ScannerError.UNEXPECTED_CHARACTER, f"Unexpected character: '{c}'.")

    # Errors

    def error(self, kind: ScannerError, message: str) -> None:
        self.reporter.report(self.start_line, self.start_column, message)
        raise TrollError(kind, message)

    def malformed(self, message: str) -> None:
        found = 'end of input' if self.at_end() else f"'{self.peek()}'"
        self.error(ScannerError.MALFORMED_TOKEN, f"{message}; found {found}.")

    # Long tokens

    def string(self) -> None:
        while self.peek() != '"' and self.peek() != '\n' and not self.at_end():
            self.advance()

        if self.at_end() or self.peek() == '\n':
            self.error(ScannerError.UNTERMINATED_STRING, "Unterminated string.")

        value = self.source[self.start + 1:self.current]
        self.advance()  # closing quote

        for chunk in extract_concatenation_operators(value):
            if chunk in CONCATENATION_OPERATORS:
                self.add_token(CONCATENATION_OPERATORS[chunk], lexeme=chunk)
            else:
                self.add_token(TokenType.STRING, literal=chunk, lexeme=f'"{chunk}"')

    def identifier(self) -> None:
        while self.peek().isalpha():
            self.advance()
        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def real_or_zero(self) -> None:
        # `0..n` is a range starting at zero, not a real
        if self.peek() == '.' and self.peek_next() != '.':
            self.advance()
            while _is_digit(self.peek()):
                self.advance()
            text = self.source[self.start:self.current]
            self.add_token(TokenType.REAL, literal=float(text))
        else:
            self.add_token(TokenType.INTEGER, literal=0)

    def integer(self) -> None:
        while _is_digit(self.peek()):
            self.advance()
        self.add_token(TokenType.INTEGER, literal=int(self.source[self.start:self.current]))

    # Scanning helpers

    def at_end(self) -> bool:
        return self.current >= len(self.source)

    def advance(self) -> str:
        c = self.source[self.current]
        self.current += 1
        if c == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return c

    def peek(self) -> str:
        if self.at_end():
            return '\0'
        return self.source[self.current]

    def peek_next(self) -> str:
        if self.current + 1 >= len(self.source):
            return '\0'
        return self.source[self.current + 1]

    def match(self, expected: str) -> bool:
        if self.at_end() or self.source[self.current] != expected:
            return False
        self.advance()
        return True

    def add_token(self, token_type: TokenType,
                  literal: Optional[Union[int, float, str]] = None,
                  lexeme: Optional[str] = None) -> None:
        if lexeme is None:
            lexeme = self.source[self.start:self.current]
        self.tokens.append(Token(token_type, lexeme, literal, self.start_line, self.start_column))


def scan(source: str, reporter=None) -> Result:
    """Scan source text into tokens; returns `Ok(tokens)` or `Err(ScannerError)`."""
    return Scanner(source, reporter).scan()
