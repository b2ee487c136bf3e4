"""Session host for running Troll scripts.

A `Session` owns one interpreter for its whole life, so functions defined
by one script stay available to the next and variables set with ``+set``
stay bound until removed. Lines starting with ``+`` (and the ``-set``,
``-scanner`` and ``-parser`` commands) are session commands; they are
parsed with a small Lark grammar. Every other line is a Troll script.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import List, Optional, TextIO

from lark import Lark, Transformer
from lark.exceptions import LarkError

from .environment import Symbol
from .interpreter import Interpreter
from .parser import parse, parse_args
from .scanner import scan
from .values import Collection

COMMAND_GRAMMAR = r"""
    ?start: command

    ?command: "+help"                -> help
            | "+quit"                -> quit
            | "+version"             -> version
            | "+multiline"           -> multiline
            | "+scanner"             -> show_tokens
            | "-scanner"             -> hide_tokens
            | "+parser"              -> show_tree
            | "-parser"              -> hide_tree
            | "+set" IDENT INT       -> set_variable
            | "-set" IDENT           -> unset_variable

    IDENT: /[A-Za-z]+/
    INT: /-?[0-9]+/

    %import common.WS_INLINE
    %ignore WS_INLINE
"""

COMMAND_PARSER = Lark(COMMAND_GRAMMAR, parser='lalr')

UNSIGNED_COMMANDS = ('-set', '-scanner', '-parser')

HELP = """\
Commands:

+help - print this message
+multiline - enter a Troll script over multiple lines
+/-parser - turn on/off printing of abstract syntax tree
+/-scanner - turn on/off printing of token stream
+set <identifier> <integer> - set a variable to be used in subsequent Troll expressions
-set <identifier> - remove the definition for <identifier>
+version - print the version

+quit - quit the interpreter

Any other line will be assumed to be a Troll script and parsed accordingly.
"""


@dataclass(frozen=True)
class Command:
    name: str
    identifier: Optional[str] = None
    value: Optional[int] = None


class CommandTransformer(Transformer):
    """Turns a command parse tree into a `Command`."""

    def set_variable(self, items):
        return Command('set_variable', str(items[0]), int(items[1]))

    def unset_variable(self, items):
        return Command('unset_variable', str(items[0]))

    def __default__(self, data, children, meta):
        return Command(str(data))


def is_command(line: str) -> bool:
    line = line.strip()
    if line.startswith('+'):
        return True
    words = line.split()
    return bool(words) and words[0] in UNSIGNED_COMMANDS


def parse_command(line: str) -> Command:
    """Parse a session command; raises `lark.exceptions.LarkError` when malformed."""
    tree = COMMAND_PARSER.parse(line.strip())
    return CommandTransformer().transform(tree)


class Session:
    prompt = "troll> "

    def __init__(self, interpreter: Optional[Interpreter] = None,
                 stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        self.interpreter = interpreter if interpreter is not None else Interpreter()
        self.stdin = stdin
        self.stdout = stdout
        self.show_tokens = False
        self.show_tree = False
        self.had_error = False
        self.had_runtime_error = False

    @property
    def reporter(self):
        return self.interpreter.reporter

    def write(self, text: str = '') -> None:
        print(text, file=self.stdout if self.stdout is not None else sys.stdout)

    def read_line(self, prompt: str = '') -> Optional[str]:
        stream = self.stdin if self.stdin is not None else sys.stdin
        out = self.stdout if self.stdout is not None else sys.stdout
        if prompt:
            out.write(prompt)
            out.flush()
        line = stream.readline()
        if not line:
            return None
        return line.rstrip('\n')

    # Scripts

    def run(self, source: str, repetitions: int = 1) -> None:
        """Compile `source`, then evaluate and print it `repetitions` times."""
        tokens = scan(source, self.reporter)
        if not tokens.is_ok:
            self.had_error = True
            return
        if self.show_tokens:
            self.write(' '.join(str(t) for t in tokens.value))

        parsed = parse(tokens.value, self.reporter)
        if not parsed.is_ok:
            self.had_error = True
            return
        script = parsed.value
        if self.show_tree:
            self.write(f"Tree: {script.expression}")

        self.interpreter.add(script.functions)
        for _ in range(repetitions):
            result = self.interpreter.evaluate(script.expression)
            if not result.is_ok:
                self.had_runtime_error = True
                return
            self.write(str(result.value))

    def push_arguments(self, arguments: List[str]) -> bool:
        """Bind ``ID=N`` arguments in the interpreter; False if any is malformed."""
        tokens = scan(' '.join(arguments), self.reporter)
        if not tokens.is_ok:
            return False
        symbols = parse_args(tokens.value, self.reporter)
        if not symbols.is_ok:
            return False
        self.interpreter.push(symbols.value)
        return True

    # Commands

    def execute_line(self, line: str) -> bool:
        """Handle one input line. Returns False when the session should end."""
        line = line.strip()
        if not line:
            return True
        if not is_command(line):
            self.run(line)
            return True

        try:
            command = parse_command(line)
        except LarkError:
            if line.startswith('+set'):
                self.write("usage: +set <identifier> <integer>")
            elif line.startswith('-set'):
                self.write("usage: -set <identifier>")
            else:
                self.write(f"Unknown command '{line}'. Enter +help for a list of commands.")
            return True
        return self.execute_command(command)

    def execute_command(self, command: Command) -> bool:
        if command.name == 'quit':
            return False
        if command.name == 'help':
            self.print_version()
            self.write()
            self.write(HELP)
        elif command.name == 'version':
            self.print_version()
        elif command.name == 'multiline':
            self.run(self.multiline())
        elif command.name == 'show_tokens':
            self.show_tokens = True
        elif command.name == 'hide_tokens':
            self.show_tokens = False
        elif command.name == 'show_tree':
            self.show_tree = True
        elif command.name == 'hide_tree':
            self.show_tree = False
        elif command.name == 'set_variable':
            self.interpreter.push(Symbol(command.identifier, Collection.of(command.value)))
        elif command.name == 'unset_variable':
            self.interpreter.remove(command.identifier)
        return True

    def print_version(self) -> None:
        self.write(f"Troll version {self.interpreter.version}")

    def multiline(self) -> str:
        self.write("Enter '+done' on its own line when you are finished.")
        parts: List[str] = []
        while True:
            line = self.read_line()
            if line is None or line.strip() == '+done':
                break
            parts.append(line.strip())
        return '\n'.join(parts)

    def repl(self) -> None:
        while True:
            line = self.read_line(self.prompt)
            if line is None:
                self.write()
                break
            if not self.execute_line(line):
                break
