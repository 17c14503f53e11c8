"""Abstract Syntax Tree (AST) definitions for the Lox language.

The parser builds these nodes once and nothing mutates them afterwards.
Nodes compare and hash by identity (`eq=False`), which is what the
resolver relies on when it records the scope depth of each variable use.
Name tokens are kept on the nodes so runtime errors can cite a line.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, List, Optional

from .tokens import Token


@dataclass(eq=False)
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass(eq=False)
class Expr(Node):
    pass


@dataclass(eq=False)
class Stmt(Node):
    pass


# Expressions


@dataclass(eq=False)
class Literal(Expr):
    value: Any  # float, str, bool or None (nil)


@dataclass(eq=False)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(eq=False)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(eq=False)
class Logical(Expr):
    left: Expr
    operator: Token  # OR or AND
    right: Expr


@dataclass(eq=False)
class Grouping(Expr):
    expression: Expr


@dataclass(eq=False)
class Variable(Expr):
    name: Token


@dataclass(eq=False)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(eq=False)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, for error lines
    arguments: List[Expr]


@dataclass(eq=False)
class Get(Expr):
    object: Expr
    name: Token


@dataclass(eq=False)
class Set(Expr):
    object: Expr
    name: Token
    value: Expr


@dataclass(eq=False)
class This(Expr):
    keyword: Token


@dataclass(eq=False)
class Super(Expr):
    keyword: Token
    method: Token


# Statements


@dataclass(eq=False)
class Expression(Stmt):
    expression: Expr


@dataclass(eq=False)
class Print(Stmt):
    expression: Expr


@dataclass(eq=False)
class Var(Stmt):
    name: Token
    initializer: Optional[Expr]


@dataclass(eq=False)
class Block(Stmt):
    statements: List[Stmt]


@dataclass(eq=False)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass(eq=False)
class While(Stmt):
    condition: Expr
    body: Stmt


@dataclass(eq=False)
class Function(Stmt):
    name: Token
    params: List[Token]
    body: List[Stmt]


@dataclass(eq=False)
class Return(Stmt):
    keyword: Token
    value: Optional[Expr]


@dataclass(eq=False)
class Class(Stmt):
    name: Token
    superclass: Optional[Variable]
    methods: List[Function]


def first_line(node: Node) -> int:
    """Line of the first token found under `node`, or 0 if it holds none.

    Walks with an explicit stack so it still works on trees too deep to
    recurse over.
    """
    pending: List[Any] = [node]
    while pending:
        item = pending.pop()
        if isinstance(item, Token):
            return item.line
        if isinstance(item, list):
            pending.extend(reversed(item))
        elif isinstance(item, Node):
            pending.extend(reversed([getattr(item, f.name) for f in fields(item)]))
    return 0
