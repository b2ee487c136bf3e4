# Troll dice language package
# This package provides a scanner, parser and interpreter for Troll scripts.
from .errors import InterpreterError, ParserError, ScannerError, TrollError
from .interpreter import Interpreter, compile_script, run_script
from .parser import ParsedScript, parse, parse_args
from .reporter import CollectingErrorReporter, ConsoleErrorReporter
from .result import Err, Ok
from .scanner import scan
from .values import Collection, Pair, Real, Text

__all__ = [
    'scan',
    'parse',
    'parse_args',
    'compile_script',
    'run_script',
    'Interpreter',
    'ParsedScript',
    'ScannerError',
    'ParserError',
    'InterpreterError',
    'TrollError',
    'ConsoleErrorReporter',
    'CollectingErrorReporter',
    'Ok',
    'Err',
    'Collection',
    'Real',
    'Text',
    'Pair',
]
