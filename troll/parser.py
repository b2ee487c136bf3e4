"""Recursive-descent parser for Troll.

The grammar is layered by precedence. From loosest to tightest binding:

    expression    if / foreach / repeat / accumulate / id := def ; use
    precedence2   e (|> | <| | <> | ||) e            left-assoc, string-string
    precedence3   e .. e                              at most once
    precedence4   e (drop | keep | pick | --) e       left-assoc
    precedence5   e (U | @ | &) e                     left-assoc
    term          e (+ | -) e                         left-assoc
    factor        e (* | / | mod) e                   left-assoc
    precedence8   - e
    precedence9   count e, sum e, ..., %1 e, least e e, e ' e
    precedence10  e (= | =/= | < | > | <= | >=) e     right-recursive
    multidie      e (d | z | # | ~) die               left-assoc
    die           (d | z) die
    primary       literals, variables, call, ( ), { }, [ ], ?real

Each binary and unary node is tagged with the operand schema that its
operator belongs to, so the evaluator never has to guess operand shapes.
"""

from __future__ import annotations

from typing import Dict, List, NamedTuple, Optional

from .ast import (
    Accumulate, Binary, BinarySchema, Binding, CollectionLiteral, EndStyle,
    Expr, Foreach, FunctionCall, Group, If, Literal, Repeat, TupleLiteral,
    Unary, UnarySchema, Variable,
)
from .environment import Symbol
from .errors import ParserError, TrollError
from .function import FunctionDefinition
from .reporter import ConsoleErrorReporter
from .result import Err, Ok, Result
from .tokens import Token, TokenType
from .values import Collection, Real, Text


class ParsedScript(NamedTuple):
    expression: Expr
    functions: Dict[str, FunctionDefinition]


COMPARISON_OPERATORS = (TokenType.EQ, TokenType.NEQ, TokenType.LT, TokenType.LE, TokenType.GT, TokenType.GE)

PREFIX_OPERATORS = (
    TokenType.COUNT, TokenType.SUM, TokenType.MIN, TokenType.MAX, TokenType.MINIMAL,
    TokenType.MAXIMAL, TokenType.MEDIAN, TokenType.CHOOSE, TokenType.DIFFERENT,
    TokenType.BANG, TokenType.SGN, TokenType.SAMPLE,
)

LAYOUT_OPERATORS = (TokenType.VCONCL, TokenType.VCONCR, TokenType.VCONCC, TokenType.HCONC)


class Parser:
    def __init__(self, tokens: List[Token], reporter=None):
        self.tokens = tokens
        self.reporter = reporter if reporter is not None else ConsoleErrorReporter()
        self.current = 0

    def parse(self) -> Result[ParsedScript, ParserError]:
        try:
            return Ok(self.script())
        except TrollError as ex:
            return Err(ex.kind)

    def parse_args(self) -> Result[List[Symbol], ParserError]:
        """Parse a sequence of ``identifier = integer`` assignments."""
        message = "Arguments must be 'identifier=integer'."
        symbols: List[Symbol] = []
        try:
            while not self.at_end():
                identifier = self.consume(TokenType.IDENTIFIER, message, ParserError.MALFORMED_ARGUMENT)
                self.consume(TokenType.EQ, message, ParserError.MALFORMED_ARGUMENT)
                value = self.consume(TokenType.INTEGER, message, ParserError.MALFORMED_ARGUMENT)
                symbols.append(Symbol(identifier.lexeme, Collection.of(value.literal)))
        except TrollError as ex:
            return Err(ex.kind)
        return Ok(symbols)

    ###########################################################################
    # Script structure
    ###########################################################################

    def script(self) -> ParsedScript:
        functions: Dict[str, FunctionDefinition] = {}
        self.function_definitions(functions)
        expr = self.expression()
        self.function_definitions(functions)

        if not self.at_end():
            self.error(ParserError.UNEXPECTED_TOKEN, "Unexpected token at end of script.")
        return ParsedScript(expr, functions)

    def function_definitions(self, functions: Dict[str, FunctionDefinition]) -> None:
        while self.match(TokenType.FUNCTION):
            definition = self.function_definition()
            if definition.identifier in functions:
                self.error(ParserError.INVALID_REDEFINITION, f"{definition.identifier} already defined.")
            functions[definition.identifier] = definition

    def function_definition(self) -> FunctionDefinition:
        identifier = self.consume(TokenType.IDENTIFIER, "'function' keyword must be followed by function name.")
        self.consume(TokenType.LPAREN, "Function name must be followed by '('.")
        parameters: List[str] = []
        if not self.match(TokenType.RPAREN):
            while True:
                parameters.append(self.consume(TokenType.IDENTIFIER, "Expecting parameter name.").lexeme)
                if not self.match(TokenType.COMMA):
                    break
            self.consume(TokenType.RPAREN, "Parameters must be followed by ')'.")
        self.consume(TokenType.EQ, "Parameter list must be followed by '='.")
        body = self.expression()
        return FunctionDefinition(identifier.lexeme, tuple(parameters), body)

    ###########################################################################
    # Statements
    ###########################################################################

    def expression(self) -> Expr:
        if self.match(TokenType.IF):
            return self.if_statement()
        if self.match(TokenType.FOREACH):
            return self.foreach_statement()
        if self.match(TokenType.REPEAT):
            return self.loop_statement('Repeat', Repeat)
        if self.match(TokenType.ACCUMULATE):
            return self.loop_statement('Accumulate', Accumulate)
        if self.check(TokenType.IDENTIFIER) and self.check_next(TokenType.ASSIGN):
            return self.binding()
        return self.precedence2()

    def binding(self) -> Expr:
        identifier = self.advance().lexeme
        self.advance()  # ':='
        definition = self.expression()
        self.consume(TokenType.SEMICOLON, "Expected ';' after assignment.")
        use = self.expression()
        return Binding(identifier, definition, use)

    def if_statement(self) -> Expr:
        condition = self.expression()
        self.consume(TokenType.THEN, "'then' expected after 'if' condition.")
        then_branch = self.expression()
        self.consume(TokenType.ELSE, "'else' expected after if's true branch.")
        else_branch = self.expression()
        return If(condition, then_branch, else_branch)

    def foreach_statement(self) -> Expr:
        identifier = self.consume(TokenType.IDENTIFIER, "Foreach must be followed by an identifier name.").lexeme
        self.consume(TokenType.IN, "Foreach variable must be followed by 'in'.")
        source = self.expression()
        self.consume(TokenType.DO, "Foreach expression must be followed by 'do'.")
        body = self.expression()
        return Foreach(identifier, source, body)

    def loop_statement(self, keyword: str, node_type) -> Expr:
        identifier = self.consume(TokenType.IDENTIFIER, f"{keyword} must be followed by an identifier name.").lexeme
        self.consume(TokenType.ASSIGN, f"{keyword} variable must be followed by ':='.")
        expr = self.expression()
        end_style = EndStyle.for_token(self.peek().type)
        if end_style is None:
            self.error(ParserError.MISSING_CONDITION, "Expected either 'while' or 'until'.")
        self.advance()
        test = self.expression()
        return node_type(identifier, expr, end_style, test)

    ###########################################################################
    # Operators
    ###########################################################################

    def precedence2(self) -> Expr:
        expr = self.precedence3()
        while self.match(*LAYOUT_OPERATORS):
            op = self.previous()
            right = self.precedence3()
            expr = Binary(expr, op, BinarySchema.STRING_STRING, right)
        return expr

    def precedence3(self) -> Expr:
        expr = self.precedence4()
        # '..' does not chain; a second one is left for the caller to reject
        if self.match(TokenType.DOT_DOT):
            op = self.previous()
            right = self.precedence4()
            expr = Binary(expr, op, BinarySchema.SINGLETON_SINGLETON, right)
        return expr

    def precedence4(self) -> Expr:
        expr = self.precedence5()
        while self.match(TokenType.DROP, TokenType.KEEP, TokenType.PICK, TokenType.SET_MINUS):
            op = self.previous()
            right = self.precedence5()
            schema = BinarySchema.COLLECTION_SINGLETON if op.type is TokenType.PICK else BinarySchema.COLLECTION_COLLECTION
            expr = Binary(expr, op, schema, right)
        return expr

    def precedence5(self) -> Expr:
        expr = self.term()
        while self.match(TokenType.UNION, TokenType.AND):
            op = self.previous()
            right = self.term()
            expr = Binary(expr, op, BinarySchema.COLLECTION_COLLECTION, right)
        return expr

    def term(self) -> Expr:
        expr = self.factor()
        while self.match(TokenType.MINUS, TokenType.PLUS):
            op = self.previous()
            right = self.factor()
            expr = Binary(expr, op, BinarySchema.SINGLETON_SINGLETON, right)
        return expr

    def factor(self) -> Expr:
        expr = self.precedence8()
        while self.match(TokenType.DIVIDE, TokenType.TIMES, TokenType.MOD):
            op = self.previous()
            right = self.precedence8()
            expr = Binary(expr, op, BinarySchema.SINGLETON_SINGLETON, right)
        return expr

    def precedence8(self) -> Expr:
        if self.match(TokenType.MINUS):
            op = self.previous()
            return Unary(op, UnarySchema.SINGLETON, self.precedence8())
        return self.precedence9()

    def precedence9(self) -> Expr:
        if self.match(*PREFIX_OPERATORS):
            op = self.previous()
            right = self.precedence9()
            if op.type is TokenType.SAMPLE:
                schema = UnarySchema.DEFERRED
            elif op.type is TokenType.SGN:
                schema = UnarySchema.SINGLETON
            else:
                schema = UnarySchema.COLLECTION
            return Unary(op, schema, right)

        if self.match(TokenType.FIRST, TokenType.SECOND):
            op = self.previous()
            return Unary(op, UnarySchema.TUPLE, self.precedence9())

        if self.match(TokenType.LEAST, TokenType.LARGEST):
            op = self.previous()
            left = self.precedence9()
            right = self.precedence9()
            return Binary(left, op, BinarySchema.SINGLETON_COLLECTION, right)

        expr = self.precedence10()
        while self.match(TokenType.SAMPLE):
            op = self.previous()
            right = self.precedence9()
            expr = Binary(expr, op, BinarySchema.DEFERRED, right)
        return expr

    def precedence10(self) -> Expr:
        expr = self.multidie()
        while self.match(*COMPARISON_OPERATORS):
            op = self.previous()
            right = self.precedence10()
            expr = Binary(expr, op, BinarySchema.SINGLETON_COLLECTION, right)
        return expr

    def multidie(self) -> Expr:
        expr = self.die()
        while self.match(TokenType.DIE, TokenType.ZERO_DIE, TokenType.HASH, TokenType.TILDE):
            op = self.previous()
            right = self.die()
            if op.type is TokenType.TILDE:
                if not isinstance(expr, Variable):
                    self.error(ParserError.NEEDS_VARIABLE, "'~' requires a variable as its left-hand operand.")
                expr = Variable(expr.identifier, right)
            else:
                schema = BinarySchema.DEFERRED if op.type is TokenType.HASH else BinarySchema.SINGLETON_SINGLETON
                expr = Binary(expr, op, schema, right)
        return expr

    def die(self) -> Expr:
        if self.match(TokenType.DIE, TokenType.ZERO_DIE):
            op = self.previous()
            return Unary(op, UnarySchema.SINGLETON, self.die())
        return self.primary()

    def primary(self) -> Expr:
        if self.match(TokenType.QUESTION):
            op = self.previous()
            real = self.consume(TokenType.REAL, "'?' must be followed by a real number between 0 and 1.")
            return Unary(op, UnarySchema.REAL, Literal(Real(real.literal)))

        if self.match(TokenType.CALL):
            return self.call()

        if self.match(TokenType.IDENTIFIER):
            return Variable(self.previous().lexeme)

        if self.match(TokenType.STRING):
            return Literal(Text(self.previous().literal))

        if self.match(TokenType.INTEGER):
            return Literal(Collection.of(self.previous().literal))

        if self.match(TokenType.LPAREN):
            expr = self.expression()
            self.consume(TokenType.RPAREN, "Expect ')' after expression.")
            return Group(expr)

        if self.match(TokenType.LBRACE):
            elements = self.expression_list(TokenType.RBRACE, "Expect '}' after expression collection.")
            return CollectionLiteral(tuple(elements))

        if self.match(TokenType.LBRACK):
            elements = self.expression_list(TokenType.RBRACK, "Expect ']' after tuple.")
            if len(elements) != 2:
                self.error(ParserError.UNEXPECTED_TOKEN,
                           f"A tuple must have exactly two elements, found {len(elements)}.", self.previous())
            return TupleLiteral(elements[0], elements[1])

        self.error(ParserError.UNEXPECTED_TOKEN, "Unexpected characters when parsing literal expression.")

    def call(self) -> Expr:
        identifier = self.consume(TokenType.IDENTIFIER, "Function name must follow 'call'.")
        self.consume(TokenType.LPAREN, "Function name must be followed by '('.")
        arguments: List[Expr] = []
        if not self.match(TokenType.RPAREN):
            while True:
                arguments.append(self.expression())
                if not self.match(TokenType.COMMA):
                    break
            self.consume(TokenType.RPAREN, "Arguments must be followed by ')'.")
        return FunctionCall(identifier.lexeme, tuple(arguments))

    def expression_list(self, closing: TokenType, message: str) -> List[Expr]:
        elements: List[Expr] = []
        if not self.check(closing):
            while True:
                elements.append(self.expression())
                if not self.match(TokenType.COMMA):
                    break
        self.consume(closing, message)
        return elements

    ###########################################################################
    # Helpers
    ###########################################################################

    def error(self, kind: ParserError, message: str, token: Optional[Token] = None) -> None:
        token = token if token is not None else self.peek()
        self.reporter.report(token.line, token.column, message)
        raise TrollError(kind, message)

    def match(self, *types: TokenType) -> bool:
        for token_type in types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def consume(self, token_type: TokenType, message: str,
                kind: ParserError = ParserError.UNEXPECTED_TOKEN) -> Token:
        if self.check(token_type):
            return self.advance()
        self.error(kind, message)

    def check(self, token_type: TokenType) -> bool:
        if self.at_end():
            return False
        return self.peek().type is token_type

    def check_next(self, token_type: TokenType) -> bool:
        if self.current + 1 >= len(self.tokens):
            return False
        return self.tokens[self.current + 1].type is token_type

    def advance(self) -> Token:
        if not self.at_end():
            self.current += 1
        return self.previous()

    def at_end(self) -> bool:
        return self.peek().type is TokenType.EOF

    def peek(self) -> Token:
        return self.tokens[self.current]

    def previous(self) -> Token:
        return self.tokens[self.current - 1]


def parse(tokens: List[Token], reporter=None) -> Result[ParsedScript, ParserError]:
    """Parse a token list into `Ok(ParsedScript)` or `Err(ParserError)`."""
    return Parser(tokens, reporter).parse()


def parse_args(tokens: List[Token], reporter=None) -> Result[List[Symbol], ParserError]:
    """Parse ``identifier = integer`` assignments into initial bindings."""
    return Parser(tokens, reporter).parse_args()
