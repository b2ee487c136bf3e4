"""Tree-walking interpreter for Troll.

The interpreter owns all evaluation state: one LIFO stack of bindings, one
flat table of function definitions and the random source used by dice,
`pick`, `choose` and `?`. The state persists across calls to `evaluate`
until `reset()` is called, so a host can register functions and seed
variables once and then evaluate many scripts.
"""

from __future__ import annotations

import random
import sys
from contextlib import contextmanager
from enum import Enum
from typing import Dict, Iterable, Iterator, List, NoReturn, Optional, Union

from . import operators
from .ast import (
    Accumulate, Binary, Binding, CollectionLiteral, EndStyle, Expr, Foreach,
    FunctionCall, Group, If, Literal, Repeat, TupleLiteral, Unary, Variable,
)
from .environment import ScopeStack, Symbol
from .errors import InternalError, InterpreterError, TrollError
from .function import FunctionDefinition
from .parser import ParsedScript, parse
from .reporter import ConsoleErrorReporter
from .result import Err, Ok, Result
from .scanner import scan
from .tokens import Token
from .values import Collection, Pair, Value, type_name

FunctionTable = Dict[str, FunctionDefinition]


class Interpreter:
    """Evaluates expression trees against a persistent scope and function table."""

    version = "0.5.0"

    def __init__(self, reporter=None, rng: Optional[random.Random] = None, seed=None,
                 debug_level: int = 0, debug_file: Optional[str] = None):
        self.reporter = reporter if reporter is not None else ConsoleErrorReporter()
        self.rng = rng if rng is not None else random.Random(seed)
        self.stack = ScopeStack()
        self.functions: FunctionTable = {}
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 and debug_file else None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg, file=sys.stderr)

    def close(self) -> None:
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Host API

    def add(self, functions: Union[FunctionDefinition, FunctionTable]) -> None:
        """Register one definition or a whole table, replacing same-named entries."""
        if isinstance(functions, FunctionDefinition):
            functions = {functions.identifier: functions}
        for identifier, definition in functions.items():
            if self.debug_level >= 2:
                self.debug(f"define function {identifier}/{definition.arity}")
            self.functions[identifier] = definition

    def push(self, symbols: Union[Symbol, Iterable[Symbol]]) -> None:
        if isinstance(symbols, Symbol):
            symbols = [symbols]
        for symbol in symbols:
            if self.debug_level >= 2:
                self.debug(f"push {symbol.identifier} = {symbol.value}")
            self.stack.push(symbol)

    def pop(self) -> Symbol:
        symbol = self.stack.pop()
        if self.debug_level >= 2:
            self.debug(f"pop {symbol.identifier}")
        return symbol

    def remove(self, identifier: str) -> bool:
        return self.stack.remove(identifier)

    def lookup(self, identifier: str) -> Optional[Value]:
        return self.stack.lookup(identifier)

    def function_lookup(self, identifier: str) -> Optional[FunctionDefinition]:
        return self.functions.get(identifier)

    def reset(self) -> None:
        """Forget every function and binding."""
        self.functions.clear()
        self.stack.clear()

    def evaluate(self, expr: Expr) -> Result[Value, InterpreterError]:
        if self.debug_level >= 1:
            self.debug(f"evaluate {expr}")
        depth = self.stack.depth
        try:
            value = expr.evaluate(self)
        except TrollError as error:
            self.stack.truncate(depth)
            if self.debug_level >= 1:
                self.debug(f"error {error.kind.name}")
            return Err(error.kind)
        if self.debug_level >= 1:
            self.debug(f"result {value}")
        return Ok(value)

    # Errors

    def fail(self, kind: InterpreterError, message: str, token: Optional[Token] = None) -> NoReturn:
        """Report `message` and abort the current evaluation with `kind`."""
        if token is None:
            self.reporter.report(-1, -1, message)
        else:
            self.reporter.report(token.line, token.column, message)
        raise TrollError(kind, message)

    @contextmanager
    def scope(self) -> Iterator[None]:
        """Restore the binding stack to its current depth when the block exits."""
        depth = self.stack.depth
        try:
            yield
        finally:
            self.stack.truncate(depth)

    ###########################################################################
    # Evaluation
    ###########################################################################

    def evaluate_node(self, node: Expr) -> Value:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Group):
            return node.expr.evaluate(self)
        if isinstance(node, Binary):
            return operators.evaluate_binary(node, self)
        if isinstance(node, Unary):
            return operators.evaluate_unary(node, self)
        if isinstance(node, Variable):
            return self.evaluate_variable(node)
        if isinstance(node, If):
            condition = node.condition.evaluate(self)
            if self.debug_level >= 3:
                self.debug(f"if condition {condition} -> {condition.is_truthy}")
            if condition.is_truthy:
                return node.then_branch.evaluate(self)
            return node.else_branch.evaluate(self)
        if isinstance(node, Binding):
            value = node.definition.evaluate(self)
            with self.scope():
                self.push(Symbol(node.identifier, value))
                result = node.use.evaluate(self)
                self.pop()
            return result
        if isinstance(node, Foreach):
            return self.evaluate_foreach(node)
        if isinstance(node, Repeat):
            return self.evaluate_loop(node, accumulate=False)
        if isinstance(node, Accumulate):
            return self.evaluate_loop(node, accumulate=True)
        if isinstance(node, FunctionCall):
            return self.call_function(node)
        if isinstance(node, CollectionLiteral):
            values: List[int] = []
            for element in node.elements:
                value = element.evaluate(self)
                if not isinstance(value, Collection):
                    self.fail(InterpreterError.NON_COLLECTION_VALUE,
                              f"Collection elements must be integers or collections. Received {type_name(value)}.")
                values.extend(value)
            return Collection(values)
        if isinstance(node, TupleLiteral):
            first = node.first.evaluate(self)
            second = node.second.evaluate(self)
            return Pair(first, second)
        raise InternalError(f"cannot evaluate node {type(node).__name__}")

    def evaluate_variable(self, node: Variable) -> Value:
        value = self.lookup(node.identifier)
        if value is not None:
            return value
        if node.default is not None:
            return node.default.evaluate(self)
        self.fail(InterpreterError.UNKNOWN_VARIABLE, f"Unknown variable '{node.identifier}'.")

    def evaluate_foreach(self, node: Foreach) -> Value:
        source = node.source.evaluate(self)
        if not isinstance(source, Collection):
            self.fail(InterpreterError.NEEDS_INT_COLLECTION,
                      f"Foreach requires a collection to iterate over. Received {type_name(source)}.")
        values: List[int] = []
        with self.scope():
            for element in source:
                if self.debug_level >= 3:
                    self.debug(f"foreach {node.identifier} = {element}")
                self.push(Symbol(node.identifier, Collection.of(element)))
                result = node.body.evaluate(self)
                self.pop()
                if not isinstance(result, Collection):
                    self.fail(InterpreterError.NON_COLLECTION_VALUE,
                              f"Foreach body must produce a collection. Received {type_name(result)}.")
                values.extend(result)
        return Collection(values)

    def evaluate_loop(self, node: Union[Repeat, Accumulate], accumulate: bool) -> Value:
        keyword = 'accumulate' if accumulate else 'repeat'
        values: List[int] = []
        with self.scope():
            while True:
                value = node.expr.evaluate(self)
                if accumulate:
                    if not isinstance(value, Collection):
                        self.fail(InterpreterError.NEEDS_INT_COLLECTION,
                                  f"Accumulate expression must produce a collection. Received {type_name(value)}.")
                    values.extend(value)
                self.push(Symbol(node.identifier, value))
                test = node.test.evaluate(self)
                if not isinstance(test, Collection):
                    self.fail(InterpreterError.NEEDS_INT_COLLECTION,
                              f"Test of {keyword} must produce a collection. Received {type_name(test)}.")
                if self.debug_level >= 3:
                    self.debug(f"{keyword} {node.identifier} = {value}, {node.end_style.value} {test}")
                self.pop()
                if test.is_truthy == (node.end_style is EndStyle.UNTIL):
                    break
        return Collection(values) if accumulate else value

    def call_function(self, node: FunctionCall) -> Value:
        definition = self.function_lookup(node.identifier)
        if definition is None:
            self.fail(InterpreterError.UNKNOWN_FUNCTION, f"Unknown function '{node.identifier}'.")
        if len(node.arguments) != definition.arity:
            self.fail(InterpreterError.INCORRECT_ARGUMENT_COUNT,
                      f"Function '{node.identifier}' expects {definition.arity} argument(s), "
                      f"received {len(node.arguments)}.")
        if self.debug_level >= 3:
            self.debug(f"call {node.identifier}")
        with self.scope():
            for parameter, argument in zip(definition.parameters, node.arguments):
                self.push(Symbol(parameter, argument.evaluate(self)))
            result = definition.body.evaluate(self)
            for _ in definition.parameters:
                self.pop()
        return result


def compile_script(source: str, reporter=None) -> Result[ParsedScript, Enum]:
    """Scan and parse `source`, returning `Ok(ParsedScript)` or the first error."""
    tokens = scan(source, reporter)
    if not tokens.is_ok:
        return tokens
    return parse(tokens.value, reporter)


def run_script(source: str, interpreter: Optional[Interpreter] = None,
               repetitions: int = 1) -> Result[List[Value], Enum]:
    """Compile `source` and evaluate it `repetitions` times.

    The script's functions are registered with the interpreter before the
    first evaluation. Evaluation stops at the first runtime error.
    """
    if interpreter is None:
        interpreter = Interpreter()
    compiled = compile_script(source, interpreter.reporter)
    if not compiled.is_ok:
        return compiled
    script = compiled.value
    interpreter.add(script.functions)
    values: List[Value] = []
    for _ in range(repetitions):
        result = interpreter.evaluate(script.expression)
        if not result.is_ok:
            return result
        values.append(result.value)
    return Ok(values)
