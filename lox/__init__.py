# Lox language package
# This package provides a lexer, parser, resolver and tree-walking interpreter for Lox.
from .errors import ErrorReporter, LoxRuntimeError
from .interpreter import Interpreter, run_file, run_program
from .lexer import tokenize
from .parser import parse_program

__all__ = [
    'ErrorReporter',
    'Interpreter',
    'LoxRuntimeError',
    'parse_program',
    'run_file',
    'run_program',
    'tokenize',
]
