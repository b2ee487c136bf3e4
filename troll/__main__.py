"""CLI entry point for the Troll dice roller.

Usage:
    python -m troll [-v...] [N] <script> [ID1=N1 ... IDn=Nn]
    python -m troll [-v...] --emit-ast <script>
    python -m troll [-v...] --ast <ast_json_file> [N] [ID1=N1 ...]
    python -m troll

Options:
  -v            Increase debug verbosity (can be repeated)
  --debug-file  Write debug output to a file instead of stderr
  --emit-ast    Parse the given script and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

A leading integer N runs the script N times, printing each result. ID=N
arguments bind variables before the script runs. With no arguments the
script is read from standard input when it is redirected; otherwise an
interactive session starts.

Exit status follows sysexits.h: 64 for usage and compile errors, 66 when
the script cannot be read and 70 when evaluation fails.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .ast_json import script_from_obj, script_to_obj
from .interpreter import Interpreter, compile_script
from .shell import Session

USAGE = "usage: troll [[N] <script> [ID1=N1] [ID2=N2] ... [IDn=Nn]]"

EX_USAGE = 64
EX_NOINPUT = 66
EX_SOFTWARE = 70


def usage_error() -> None:
    print(USAGE, file=sys.stderr)
    sys.exit(EX_USAGE)


def split_repetitions(arguments: List[str]) -> Tuple[int, List[str]]:
    """Strip an optional leading repetition count from the positional arguments."""
    if arguments:
        try:
            repetitions = int(arguments[0])
        except ValueError:
            return 1, arguments
        if repetitions < 1:
            usage_error()
        return repetitions, arguments[1:]
    return 1, arguments


def read_source(path: Path) -> str:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except OSError as e:
        print(f"Error: cannot read {path}: {e.strerror}", file=sys.stderr)
        sys.exit(EX_NOINPUT)


def emit_ast(script_file: Path, interpreter: Interpreter) -> None:
    source = read_source(script_file)
    compiled = compile_script(source, interpreter.reporter)
    if not compiled.is_ok:
        sys.exit(EX_USAGE)
    out_path = script_file.with_name(script_file.name + '.ast.json')
    with open(out_path, 'w', encoding='utf-8') as out:
        json.dump(script_to_obj(compiled.value), out, ensure_ascii=False, indent=2)
    print(str(out_path))


def run_ast(ast_file: Path, arguments: List[str], session: Session) -> None:
    repetitions, rest = split_repetitions(arguments)
    try:
        data = json.loads(read_source(ast_file))
        script = script_from_obj(data)
    except (ValueError, TypeError, KeyError) as e:
        print(f"Error: {ast_file} is not a Troll AST file: {e}", file=sys.stderr)
        sys.exit(EX_USAGE)
    if rest and not session.push_arguments(rest):
        usage_error()

    interpreter = session.interpreter
    interpreter.add(script.functions)
    for _ in range(repetitions):
        result = interpreter.evaluate(script.expression)
        if not result.is_ok:
            sys.exit(EX_SOFTWARE)
        session.write(str(result.value))


def run_file(arguments: List[str], session: Session) -> None:
    repetitions, rest = split_repetitions(arguments)
    if not rest:
        usage_error()
    script_file, bindings = Path(rest[0]), rest[1:]
    if bindings and not session.push_arguments(bindings):
        usage_error()
    session.run(read_source(script_file), repetitions)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog='troll', description="Troll dice roller")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--debug-file', metavar='FILE', help='write debug output to FILE instead of stderr')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='SCRIPT', help='emit AST JSON for the given script')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('arguments', nargs='*', help='[N] SCRIPT [ID=N ...]')
    args = parser.parse_args(argv)

    interpreter = Interpreter(debug_level=args.v, debug_file=args.debug_file)
    session = Session(interpreter)
    try:
        if args.emit_ast:
            emit_ast(Path(args.emit_ast), interpreter)
            return
        if args.ast:
            run_ast(Path(args.ast), args.arguments, session)
            return

        if args.arguments:
            run_file(args.arguments, session)
        elif sys.stdin.isatty():
            session.repl()
            return
        else:
            session.run(sys.stdin.read())
    finally:
        interpreter.close()

    if session.had_error:
        sys.exit(EX_USAGE)
    if session.had_runtime_error:
        sys.exit(EX_SOFTWARE)


if __name__ == '__main__':
    main()
