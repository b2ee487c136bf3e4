"""Error taxonomies for the Troll toolchain.

Each phase (scanning, parsing, evaluation) has its own closed set of error
kinds. Inside a phase a problem is raised as a `TrollError` carrying one of
these kinds; the phase's public entry point converts it into an `Err` result
once the reporter has been told about it.
"""

from enum import Enum


class ScannerError(Enum):
    NO_SOURCE = 'no source'
    MALFORMED_TOKEN = 'malformed token'
    UNEXPECTED_CHARACTER = 'unexpected character'
    UNTERMINATED_STRING = 'unterminated string'


class ParserError(Enum):
    INVALID_REDEFINITION = 'invalid redefinition'
    MALFORMED_ARGUMENT = 'malformed argument'
    MISSING_CONDITION = 'missing condition'
    NEEDS_VARIABLE = 'needs variable'
    UNEXPECTED_TOKEN = 'unexpected token'


class InterpreterError(Enum):
    INCORRECT_ARGUMENT_COUNT = 'incorrect argument count'
    INVALID_OPERAND = 'invalid operand'
    INVALID_BINARY_OPERATOR = 'invalid binary operator'
    INVALID_UNARY_OPERATOR = 'invalid unary operator'
    NEEDS_INT_COLLECTION = 'needs int collection'
    NEEDS_PAIR = 'needs pair'
    NEEDS_REAL = 'needs real'
    NEEDS_SINGLETON = 'needs singleton'
    NEEDS_STRING = 'needs string'
    NON_COLLECTION_VALUE = 'non-collection value'
    UNKNOWN_FUNCTION = 'unknown function'
    UNKNOWN_VARIABLE = 'unknown variable'


class TrollError(Exception):
    """Exception type used to propagate a scanner, parser or runtime error."""
    def __init__(self, kind: Enum, message: str = ''):
        super().__init__(f"{kind.name}: {message}" if message else kind.name)
        self.kind = kind
        self.message = message


class InternalError(Exception):
    """Parser/evaluator mismatch. Never converted into a user-facing result."""
