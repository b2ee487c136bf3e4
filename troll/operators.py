"""Operator evaluation for binary and unary nodes.

Evaluation is a two-level dispatch. The operand schema chosen by the parser
selects one routine per schema; inside it the operand shapes are checked
once and the operator token selects a case. A real operator showing up
under a schema it never belongs to means the parser and the evaluator
disagree, which is raised as a fatal `InternalError`.

The text layout helpers at the bottom implement the four concatenation
operators on plain strings.
"""

from __future__ import annotations

import itertools
from functools import reduce
from typing import TYPE_CHECKING, List, NoReturn, Tuple

from .ast import Binary, BinarySchema, Expr, Unary, UnarySchema
from .errors import InternalError, InterpreterError
from .tokens import Token, TokenType
from .values import Collection, Pair, Real, Text, Value, lines, type_name, width

if TYPE_CHECKING:
    from .interpreter import Interpreter


BINARY_OPERATORS = frozenset({
    TokenType.AND, TokenType.DROP, TokenType.KEEP, TokenType.SET_MINUS, TokenType.UNION,
    TokenType.PICK,
    TokenType.SAMPLE, TokenType.HASH,
    TokenType.EQ, TokenType.NEQ, TokenType.LT, TokenType.GT, TokenType.LE, TokenType.GE,
    TokenType.LEAST, TokenType.LARGEST,
    TokenType.DOT_DOT, TokenType.DIE, TokenType.ZERO_DIE,
    TokenType.PLUS, TokenType.MINUS, TokenType.TIMES, TokenType.DIVIDE, TokenType.MOD,
    TokenType.HCONC, TokenType.VCONCL, TokenType.VCONCR, TokenType.VCONCC,
})

UNARY_OPERATORS = frozenset({
    TokenType.COUNT, TokenType.DIFFERENT, TokenType.CHOOSE, TokenType.SUM,
    TokenType.MIN, TokenType.MAX, TokenType.MEDIAN, TokenType.MINIMAL, TokenType.MAXIMAL,
    TokenType.BANG, TokenType.SAMPLE, TokenType.QUESTION,
    TokenType.DIE, TokenType.ZERO_DIE, TokenType.MINUS, TokenType.SGN,
    TokenType.FIRST, TokenType.SECOND,
})


def internal_error(op: Token, schema) -> NoReturn:
    raise InternalError(
        f"Trying to evaluate {op.type.name} at line {op.line}, column {op.column} "
        f"with incorrect schema: {schema.value}"
    )


###############################################################################
# Operand extraction
###############################################################################


def _collection(interpreter: 'Interpreter', op: Token, value: Value, message: str) -> Tuple[int, ...]:
    if not isinstance(value, Collection):
        interpreter.fail(InterpreterError.NEEDS_INT_COLLECTION, f"{message} Received {type_name(value)}.", op)
    return value.values


def _singleton(interpreter: 'Interpreter', op: Token, value: Value, message: str) -> int:
    if not isinstance(value, Collection) or value.integer is None:
        interpreter.fail(InterpreterError.NEEDS_SINGLETON, f"{message} Received {type_name(value)}.", op)
    return value.integer


def _string(interpreter: 'Interpreter', op: Token, value: Value, message: str) -> str:
    if not isinstance(value, Text):
        interpreter.fail(InterpreterError.NEEDS_STRING, f"{message} Received {type_name(value)}.", op)
    return value.value


def _truncated_divide(l: int, r: int) -> int:
    quotient = abs(l) // abs(r)
    return quotient if (l >= 0) == (r > 0) else -quotient


###############################################################################
# Binary operators
###############################################################################


def evaluate_binary(node: Binary, interpreter: 'Interpreter') -> Value:
    op = node.op
    if op.type not in BINARY_OPERATORS:
        interpreter.fail(InterpreterError.INVALID_BINARY_OPERATOR,
                         f"'{op.lexeme}' is not a binary operator.", op)

    lval = node.left.evaluate(interpreter)
    if node.schema is BinarySchema.DEFERRED:
        return _deferred_operand(op, lval, node.right, interpreter)
    rval = node.right.evaluate(interpreter)

    if node.schema is BinarySchema.COLLECTION_COLLECTION:
        return _collection_collection(op, lval, rval, interpreter)
    if node.schema is BinarySchema.COLLECTION_SINGLETON:
        return _collection_singleton(op, lval, rval, interpreter)
    if node.schema is BinarySchema.SINGLETON_COLLECTION:
        return _singleton_collection(op, lval, rval, interpreter)
    if node.schema is BinarySchema.SINGLETON_SINGLETON:
        return _singleton_singleton(op, lval, rval, interpreter)
    if node.schema is BinarySchema.STRING_STRING:
        return _string_string(op, lval, rval, interpreter)
    internal_error(op, node.schema)


def _collection_collection(op: Token, lval: Value, rval: Value, interpreter: 'Interpreter') -> Value:
    left = _collection(interpreter, op, lval, "Left operand must be a collection.")
    right = _collection(interpreter, op, rval, "Right operand must be a collection.")

    if op.type is TokenType.AND:
        return Collection() if not left else Collection(right)
    if op.type is TokenType.DROP:
        droppers = set(right)
        return Collection(v for v in left if v not in droppers)
    if op.type is TokenType.KEEP:
        keepers = set(right)
        return Collection(v for v in left if v in keepers)
    if op.type is TokenType.SET_MINUS:
        result = list(left)
        for element in right:
            if element in result:
                result.remove(element)
        return Collection(result)
    if op.type is TokenType.UNION:
        return Collection(left + right)
    internal_error(op, BinarySchema.COLLECTION_COLLECTION)


def _collection_singleton(op: Token, lval: Value, rval: Value, interpreter: 'Interpreter') -> Value:
    left = _collection(interpreter, op, lval, "Left operand must be a collection.")
    r = _singleton(interpreter, op, rval, "Right operand must be a single integer value.")

    if op.type is TokenType.PICK:
        if r < 0:
            interpreter.fail(InterpreterError.INVALID_OPERAND, "Number of elements to pick must be non-negative.", op)
        if r >= len(left):
            return Collection(left)
        # sampling is by position, so duplicates in the source are distinct candidates
        return Collection(interpreter.rng.sample(left, r))
    internal_error(op, BinarySchema.COLLECTION_SINGLETON)


def _repeat_operand(op: Token, count: int, expr: Expr, interpreter: 'Interpreter') -> List[Collection]:
    result: List[Collection] = []
    for _ in range(count):
        value = expr.evaluate(interpreter)
        if not isinstance(value, Collection):
            interpreter.fail(InterpreterError.NON_COLLECTION_VALUE,
                             "Repeated expression must evaluate to a collection.", op)
        result.append(value)
    return result


def _deferred_operand(op: Token, lval: Value, right: Expr, interpreter: 'Interpreter') -> Value:
    message = "Left operand must be a single, non-negative integer value."
    count = _singleton(interpreter, op, lval, message)
    if count < 0:
        interpreter.fail(InterpreterError.INVALID_OPERAND, message, op)

    if op.type is TokenType.SAMPLE:
        rows = [str(c) for c in _repeat_operand(op, count, right, interpreter)]
        return Text(reduce(vconcr, rows) if rows else '')
    if op.type is TokenType.HASH:
        collections = _repeat_operand(op, count, right, interpreter)
        return Collection(itertools.chain.from_iterable(collections))
    internal_error(op, BinarySchema.DEFERRED)


def _singleton_collection(op: Token, lval: Value, rval: Value, interpreter: 'Interpreter') -> Value:
    l = _singleton(interpreter, op, lval, "Left operand must be a single integer value.")
    right = _collection(interpreter, op, rval, "Right operand must be a collection.")

    if op.type is TokenType.EQ:
        return Collection(v for v in right if l == v)
    if op.type is TokenType.NEQ:
        return Collection(v for v in right if l != v)
    if op.type is TokenType.LT:
        return Collection(v for v in right if l < v)
    if op.type is TokenType.GT:
        return Collection(v for v in right if l > v)
    if op.type is TokenType.LE:
        return Collection(v for v in right if l <= v)
    if op.type is TokenType.GE:
        return Collection(v for v in right if l >= v)
    if op.type in (TokenType.LEAST, TokenType.LARGEST):
        if l < 0:
            interpreter.fail(InterpreterError.INVALID_OPERAND, "Number of elements must be non-negative.", op)
        ordered = sorted(right, reverse=op.type is TokenType.LARGEST)
        return Collection(ordered[:l])
    internal_error(op, BinarySchema.SINGLETON_COLLECTION)


def _roll(op: Token, count: int, faces: int, lowest: int, interpreter: 'Interpreter') -> Collection:
    if count < 0:
        interpreter.fail(InterpreterError.INVALID_OPERAND, "Number of dice rolled must be non-negative.", op)
    if faces <= 0:
        interpreter.fail(InterpreterError.INVALID_OPERAND, "Number of faces must be >0.", op)
    return Collection(interpreter.rng.randint(lowest, faces) for _ in range(count))


def _singleton_singleton(op: Token, lval: Value, rval: Value, interpreter: 'Interpreter') -> Value:
    l = _singleton(interpreter, op, lval, "Left operand must be a single integer value.")
    r = _singleton(interpreter, op, rval, "Right operand must be a single integer value.")

    if op.type is TokenType.DOT_DOT:
        return Collection(range(l, r + 1))
    if op.type is TokenType.DIE:
        return _roll(op, l, r, 1, interpreter)
    if op.type is TokenType.ZERO_DIE:
        return _roll(op, l, r, 0, interpreter)
    if op.type is TokenType.PLUS:
        return Collection.of(l + r)
    if op.type is TokenType.MINUS:
        return Collection.of(l - r)
    if op.type is TokenType.TIMES:
        return Collection.of(l * r)
    if op.type is TokenType.DIVIDE:
        if r == 0:
            interpreter.fail(InterpreterError.INVALID_OPERAND, "Division by zero.", op)
        return Collection.of(_truncated_divide(l, r))
    if op.type is TokenType.MOD:
        if r == 0:
            interpreter.fail(InterpreterError.INVALID_OPERAND, "Modulo by zero.", op)
        return Collection.of(l - r * _truncated_divide(l, r))
    internal_error(op, BinarySchema.SINGLETON_SINGLETON)


def _string_string(op: Token, lval: Value, rval: Value, interpreter: 'Interpreter') -> Value:
    l = _string(interpreter, op, lval, "Left operand must be a string.")
    r = _string(interpreter, op, rval, "Right operand must be a string.")

    if op.type is TokenType.HCONC:
        return Text(hconc(l, r))
    if op.type is TokenType.VCONCL:
        return Text(vconcl(l, r))
    if op.type is TokenType.VCONCR:
        return Text(vconcr(l, r))
    if op.type is TokenType.VCONCC:
        return Text(vconcc(l, r))
    internal_error(op, BinarySchema.STRING_STRING)


###############################################################################
# Unary operators
###############################################################################


def evaluate_unary(node: Unary, interpreter: 'Interpreter') -> Value:
    op = node.op
    if op.type not in UNARY_OPERATORS:
        interpreter.fail(InterpreterError.INVALID_UNARY_OPERATOR,
                         f"'{op.lexeme}' is not a unary operator.", op)

    value = node.right.evaluate(interpreter)

    if node.schema is UnarySchema.COLLECTION:
        return _collection_operand(op, value, interpreter)
    if node.schema is UnarySchema.DEFERRED:
        if op.type is TokenType.SAMPLE:
            return Text(str(value))
        internal_error(op, node.schema)
    if node.schema is UnarySchema.REAL:
        return _real_operand(op, value, interpreter)
    if node.schema is UnarySchema.SINGLETON:
        return _singleton_operand(op, value, interpreter)
    if node.schema is UnarySchema.TUPLE:
        return _tuple_operand(op, value, interpreter)
    internal_error(op, node.schema)


def _collection_operand(op: Token, value: Value, interpreter: 'Interpreter') -> Value:
    ints = _collection(interpreter, op, value, "Operand must be an integer collection.")

    if op.type is TokenType.COUNT:
        return Collection.of(len(ints))
    if op.type is TokenType.DIFFERENT:
        return Collection(sorted(set(ints)))
    if op.type is TokenType.CHOOSE:
        if not ints:
            interpreter.fail(InterpreterError.INVALID_OPERAND,
                             "Choose requires a non-empty collection for its operand.", op)
        return Collection.of(interpreter.rng.choice(ints))
    if op.type is TokenType.SUM:
        return Collection.of(sum(ints))
    if op.type in (TokenType.MIN, TokenType.MAX, TokenType.MEDIAN):
        if not ints:
            interpreter.fail(InterpreterError.INVALID_OPERAND,
                             f"{op.lexeme.capitalize()} cannot be applied to an empty collection.", op)
        if op.type is TokenType.MIN:
            return Collection.of(min(ints))
        if op.type is TokenType.MAX:
            return Collection.of(max(ints))
        return Collection.of(sorted(ints)[len(ints) // 2])
    if op.type is TokenType.MINIMAL:
        if not ints:
            return Collection()
        m = min(ints)
        return Collection(v for v in ints if v == m)
    if op.type is TokenType.MAXIMAL:
        if not ints:
            return Collection()
        m = max(ints)
        return Collection(v for v in ints if v == m)
    if op.type is TokenType.BANG:
        return Collection.of(1) if not ints else Collection()
    internal_error(op, UnarySchema.COLLECTION)


def _real_operand(op: Token, value: Value, interpreter: 'Interpreter') -> Value:
    if not isinstance(value, Real) or not 0.0 < value.value < 1.0:
        interpreter.fail(InterpreterError.NEEDS_REAL,
                         "Probabilistic operator requires a real number between 0 and 1 for its operand.", op)

    if op.type is TokenType.QUESTION:
        return Collection.of(1) if interpreter.rng.random() < value.value else Collection()
    internal_error(op, UnarySchema.REAL)


def _singleton_operand(op: Token, value: Value, interpreter: 'Interpreter') -> Value:
    r = _singleton(interpreter, op, value, "Operand must be a single integer.")

    if op.type is TokenType.DIE:
        return _roll(op, 1, r, 1, interpreter)
    if op.type is TokenType.ZERO_DIE:
        return _roll(op, 1, r, 0, interpreter)
    if op.type is TokenType.MINUS:
        return Collection.of(-r)
    if op.type is TokenType.SGN:
        return Collection.of((r > 0) - (r < 0))
    internal_error(op, UnarySchema.SINGLETON)


def _tuple_operand(op: Token, value: Value, interpreter: 'Interpreter') -> Value:
    if not isinstance(value, Pair):
        interpreter.fail(InterpreterError.NEEDS_PAIR, f"Operand must be a pair. Received {type_name(value)}.", op)

    if op.type is TokenType.FIRST:
        return value.first
    if op.type is TokenType.SECOND:
        return value.second
    internal_error(op, UnarySchema.TUPLE)


###############################################################################
# Text layout
###############################################################################


def _pad_box(text: str, target_width: int, side: str) -> List[str]:
    """Pad every line of a box out to `target_width` on the given side."""
    box_width = width(text)
    extra = target_width - box_width
    rows = []
    for line in lines(text):
        line = line.ljust(box_width)
        if side == 'right':
            rows.append(line + ' ' * extra)
        elif side == 'left':
            rows.append(' ' * extra + line)
        else:
            left = extra // 2
            rows.append(' ' * left + line + ' ' * (extra - left))
    return rows


def _vconc(top: str, bottom: str, side: str) -> str:
    common = max(width(top), width(bottom))
    top_rows = _pad_box(top, common, side) if width(top) < common else lines(top)
    bottom_rows = _pad_box(bottom, common, side) if width(bottom) < common else lines(bottom)
    return '\n'.join(top_rows + bottom_rows)


def hconc(left: str, right: str) -> str:
    """Place two boxes side by side, filling missing lines with blanks."""
    left_width, right_width = width(left), width(right)
    rows = []
    for l, r in itertools.zip_longest(lines(left), lines(right)):
        l = ' ' * left_width if l is None else l.ljust(left_width)
        r = ' ' * right_width if r is None else r
        rows.append(l + r)
    return '\n'.join(rows)


def vconcl(top: str, bottom: str) -> str:
    """Stack two boxes, left-aligned (the narrower one is padded on the right)."""
    return _vconc(top, bottom, 'right')


def vconcr(top: str, bottom: str) -> str:
    """Stack two boxes, right-aligned (the narrower one is padded on the left)."""
    return _vconc(top, bottom, 'left')


def vconcc(top: str, bottom: str) -> str:
    """Stack two boxes, centred."""
    return _vconc(top, bottom, 'both')
