"""Static resolution pass for Lox.

The resolver walks the AST once before execution. For every variable,
assignment, `this` and `super` it records how many scopes separate the
use from the declaration; uses it cannot find in any local scope are left
out of the table and looked up in the globals at runtime. Along the way
it reports the errors that can be caught without running the program,
such as `return` at top level or `this` outside a class.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Dict, List, MutableMapping, Optional

from .ast import (
    Assign, Binary, Block, Call, Class, Expr, Expression, Function, Get,
    Grouping, If, Literal, Logical, Print, Return, Set, Stmt, Super, This,
    Unary, Var, Variable, While, first_line,
)
from .errors import ErrorReporter
from .tokens import Token


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()
    INITIALIZER = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Resolver:
    def __init__(self, depths: MutableMapping[Expr, int], reporter: ErrorReporter):
        self.depths = depths
        self.reporter = reporter
        # each scope maps a name to whether its initializer has finished
        self.scopes: List[Dict[str, bool]] = []
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    def resolve_program(self, statements: List[Optional[Stmt]]) -> None:
        """Resolve top-level statements, reporting trees too deep to walk."""
        for stmt in statements:
            if stmt is None:
                continue
            try:
                self.resolve_stmt(stmt)
            except RecursionError:
                self.scopes = []
                self.current_function = FunctionType.NONE
                self.current_class = ClassType.NONE
                self.reporter.error(first_line(stmt), 'Nesting too deep.')

    def resolve(self, statements: List[Optional[Stmt]]) -> None:
        for stmt in statements:
            if stmt is not None:
                self.resolve_stmt(stmt)

    def resolve_stmt(self, node: Stmt) -> None:
        if isinstance(node, Block):
            self.begin_scope()
            self.resolve(node.statements)
            self.end_scope()
        elif isinstance(node, Var):
            self.declare(node.name)
            if node.initializer is not None:
                self.resolve_expr(node.initializer)
            self.define(node.name)
        elif isinstance(node, Function):
            # defined before the body so the function can recurse
            self.declare(node.name)
            self.define(node.name)
            self.resolve_function(node, FunctionType.FUNCTION)
        elif isinstance(node, Class):
            self.resolve_class(node)
        elif isinstance(node, Expression):
            self.resolve_expr(node.expression)
        elif isinstance(node, Print):
            self.resolve_expr(node.expression)
        elif isinstance(node, If):
            self.resolve_expr(node.condition)
            self.resolve_stmt(node.then_branch)
            if node.else_branch is not None:
                self.resolve_stmt(node.else_branch)
        elif isinstance(node, While):
            self.resolve_expr(node.condition)
            self.resolve_stmt(node.body)
        elif isinstance(node, Return):
            if self.current_function == FunctionType.NONE:
                self.reporter.token_error(node.keyword, "Can't return from top-level code.")
            if node.value is not None:
                if self.current_function == FunctionType.INITIALIZER:
                    self.reporter.token_error(node.keyword, "Can't return a value from an initializer.")
                self.resolve_expr(node.value)
        else:
            raise NotImplementedError(f"resolve: unexpected node type {type(node)}")

    def resolve_class(self, node: Class) -> None:
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS
        self.declare(node.name)
        self.define(node.name)

        if node.superclass is not None:
            if node.superclass.name.lexeme == node.name.lexeme:
                self.reporter.token_error(node.superclass.name, "A class can't inherit from itself.")
            self.current_class = ClassType.SUBCLASS
            self.resolve_expr(node.superclass)
            self.begin_scope()
            self.scopes[-1]['super'] = True

        self.begin_scope()
        self.scopes[-1]['this'] = True
        for method in node.methods:
            kind = FunctionType.METHOD
            if method.name.lexeme == 'init':
                kind = FunctionType.INITIALIZER
            self.resolve_function(method, kind)
        self.end_scope()

        if node.superclass is not None:
            self.end_scope()
        self.current_class = enclosing_class

    def resolve_function(self, node: Function, kind: FunctionType) -> None:
        enclosing_function = self.current_function
        self.current_function = kind
        self.begin_scope()
        for param in node.params:
            self.declare(param)
            self.define(param)
        self.resolve(node.body)
        self.end_scope()
        self.current_function = enclosing_function

    def resolve_expr(self, node: Expr) -> None:
        if isinstance(node, Variable):
            if self.scopes and self.scopes[-1].get(node.name.lexeme) is False:
                self.reporter.token_error(node.name, "Can't read local variable in its own initializer.")
            self.resolve_local(node, node.name)
        elif isinstance(node, Assign):
            self.resolve_expr(node.value)
            self.resolve_local(node, node.name)
        elif isinstance(node, This):
            if self.current_class == ClassType.NONE:
                self.reporter.token_error(node.keyword, "Can't use 'this' outside of a class.")
                return
            self.resolve_local(node, node.keyword)
        elif isinstance(node, Super):
            if self.current_class == ClassType.NONE:
                self.reporter.token_error(node.keyword, "Can't use 'super' outside of a class.")
            elif self.current_class != ClassType.SUBCLASS:
                self.reporter.token_error(node.keyword, "Can't use 'super' in a class with no superclass.")
            self.resolve_local(node, node.keyword)
        elif isinstance(node, (Binary, Logical)):
            self.resolve_expr(node.left)
            self.resolve_expr(node.right)
        elif isinstance(node, Unary):
            self.resolve_expr(node.right)
        elif isinstance(node, Grouping):
            self.resolve_expr(node.expression)
        elif isinstance(node, Call):
            self.resolve_expr(node.callee)
            for argument in node.arguments:
                self.resolve_expr(argument)
        elif isinstance(node, Get):
            self.resolve_expr(node.object)
        elif isinstance(node, Set):
            self.resolve_expr(node.value)
            self.resolve_expr(node.object)
        elif isinstance(node, Literal):
            pass
        else:
            raise NotImplementedError(f"resolve: unexpected node type {type(node)}")

    # Scope helpers

    def begin_scope(self) -> None:
        self.scopes.append({})

    def end_scope(self) -> None:
        self.scopes.pop()

    def declare(self, name: Token) -> None:
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = False

    def define(self, name: Token) -> None:
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def resolve_local(self, node: Expr, name: Token) -> None:
        for i in range(len(self.scopes) - 1, -1, -1):
            if name.lexeme in self.scopes[i]:
                self.depths[node] = len(self.scopes) - 1 - i
                return
        # not found: global
