"""CLI entry point for the Lox interpreter.

Usage:
    python -m lox [-v|-vv|-vvv] [script]
    python -m lox [-v...] --emit-ast <script>
    python -m lox [-v...] --ast <ast_json_file>
    python -m lox --print-ast <script>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given script and write an AST JSON file beside it
  --ast         Execute a previously emitted AST JSON file
  --print-ast   Parse the given script and print its statements in
                parenthesized form

With no script an interactive prompt is started; each line runs against
the same global environment. Exit status follows sysexits: 64 for bad
usage, 65 for syntax or resolution errors, 66 for a missing input file
and 70 for runtime errors.

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import builtins
import json
import sys
from pathlib import Path
from typing import List, Optional

from .ast_json import ast_from_obj, ast_to_obj
from .ast_printer import print_ast
from .errors import ErrorReporter
from .interpreter import Interpreter, raise_recursion_limit
from .parser import parse_program

EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(EX_NOINPUT)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def exit_for(reporter: ErrorReporter) -> None:
    if reporter.had_error:
        sys.exit(EX_DATAERR)
    if reporter.had_runtime_error:
        sys.exit(EX_SOFTWARE)


def run_prompt(interpreter: Interpreter) -> None:
    while True:
        try:
            line = builtins.input('> ')
        except EOFError:
            break
        interpreter.run(line)
        # the prompt forgives errors; the globals stay as they are
        interpreter.reporter.reset()


def emit_ast(program_file: Path) -> None:
    source = read_source(program_file)
    reporter = ErrorReporter()
    statements = parse_program(source, reporter)
    if reporter.had_error:
        sys.exit(EX_DATAERR)
    out_path = program_file.with_name(program_file.name + '.ast.json')
    with open(out_path, 'w', encoding='utf-8') as out:
        json.dump(ast_to_obj(statements), out, ensure_ascii=False, indent=2)
    print(str(out_path))


def run_ast(ast_path: Path, interpreter: Interpreter) -> None:
    if not ast_path.exists():
        print(f"Error: file {ast_path} not found", file=sys.stderr)
        sys.exit(EX_NOINPUT)
    with open(ast_path, 'r', encoding='utf-8') as f:
        statements = ast_from_obj(json.load(f))
    interpreter.resolve(statements)
    if not interpreter.reporter.had_error:
        interpreter.interpret(statements)
    exit_for(interpreter.reporter)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog='lox', description="Lox language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='SCRIPT', help='emit AST JSON for the given script')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    group.add_argument('--print-ast', metavar='SCRIPT', help='print the parsed statements of the given script')
    parser.add_argument('script', nargs='*', help='Lox script to execute; omit for a prompt')
    args = parser.parse_args(argv)
    raise_recursion_limit()

    if len(args.script) > 1:
        print("Usage: lox [script]")
        sys.exit(EX_USAGE)

    if args.emit_ast:
        emit_ast(Path(args.emit_ast))
        return

    if args.print_ast:
        source = read_source(Path(args.print_ast))
        reporter = ErrorReporter()
        for stmt in parse_program(source, reporter):
            print(print_ast(stmt))
        exit_for(reporter)
        return

    interpreter = Interpreter(debug_level=args.v)
    try:
        if args.ast:
            run_ast(Path(args.ast), interpreter)
        elif args.script:
            source = read_source(Path(args.script[0]))
            exit_for(interpreter.run(source))
        else:
            run_prompt(interpreter)
    finally:
        interpreter.close()


if __name__ == '__main__':
    main()
