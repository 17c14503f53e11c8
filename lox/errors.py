"""Error reporting and control-flow signals for the Lox interpreter."""

from __future__ import annotations

import sys
from typing import Any, List, Optional, TextIO

from lox.tokens import Token, TokenType


class LoxRuntimeError(Exception):
    """Exception type used to propagate Lox runtime errors."""
    def __init__(self, token: Optional[Token], message: str, line: int = 0):
        super().__init__(message)
        self.token = token
        self.message = message
        self.line = token.line if token is not None else line


class ParseError(Exception):
    """Internal exception that unwinds the parser to a statement boundary."""


class ReturnSignal:
    """Result of executing a `return` statement.

    Statements hand this back to their caller instead of raising it, so a
    return can never be mistaken for an error. Only a function call
    consumes it.
    """
    __slots__ = ('value',)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"


class ErrorReporter:
    """Collects diagnostics for one interpreter session.

    Static errors (scanning, parsing, resolving) set `had_error`; runtime
    errors set `had_runtime_error`. Every line written is also kept in
    `messages` so callers can inspect diagnostics without scraping stderr.
    """
    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream
        self.had_error = False
        self.had_runtime_error = False
        self.messages: List[str] = []

    @property
    def stream(self) -> TextIO:
        # resolved lazily so a replaced sys.stderr is honoured
        return self._stream if self._stream is not None else sys.stderr

    def error(self, line: int, message: str) -> None:
        self.report(line, '', message)

    def token_error(self, token: Token, message: str) -> None:
        if token.type == TokenType.EOF:
            self.report(token.line, ' at end', message)
        else:
            self.report(token.line, f" at '{token.lexeme}'", message)

    def report(self, line: int, where: str, message: str) -> None:
        self._emit(f"[line {line}] Error{where}: {message}")
        self.had_error = True

    def runtime_error(self, error: LoxRuntimeError) -> None:
        self._emit(f"{error.message}\n[line {error.line}]")
        self.had_runtime_error = True

    def reset(self) -> None:
        self.had_error = False
        self.had_runtime_error = False
        self.messages.clear()

    def _emit(self, text: str) -> None:
        self.messages.append(text)
        print(text, file=self.stream)
