"""Parenthesized rendering of Lox syntax trees.

Handy for eyeballing what the parser built: `1 + 2 * 3` prints as
`(+ 1 (* 2 3))` and `print a;` as `(print a)`.
"""

from __future__ import annotations

from typing import Any, Optional

from .ast import (
    Assign, Binary, Block, Call, Class, Expression, Function, Get,
    Grouping, If, Literal, Logical, Node, Print, Return, Set, Super, This,
    Unary, Var, Variable, While,
)
from .types import to_string


def parenthesize(name: str, *parts: Any) -> str:
    pieces = [name]
    for part in parts:
        pieces.append(part if isinstance(part, str) else print_ast(part))
    return '(' + ' '.join(pieces) + ')'


def print_literal(value: Any) -> str:
    if isinstance(value, str):
        return '"' + value + '"'
    return to_string(value)


def print_ast(node: Optional[Node]) -> str:
    if node is None:
        # statement that failed to parse
        return '<error>'

    # Expressions
    if isinstance(node, Literal):
        return print_literal(node.value)
    if isinstance(node, (Binary, Logical)):
        return parenthesize(node.operator.lexeme, node.left, node.right)
    if isinstance(node, Unary):
        return parenthesize(node.operator.lexeme, node.right)
    if isinstance(node, Grouping):
        return parenthesize('group', node.expression)
    if isinstance(node, Variable):
        return node.name.lexeme
    if isinstance(node, Assign):
        return parenthesize('=', node.name.lexeme, node.value)
    if isinstance(node, Call):
        return parenthesize('call', node.callee, *node.arguments)
    if isinstance(node, Get):
        return parenthesize('.', node.object, node.name.lexeme)
    if isinstance(node, Set):
        return parenthesize('=.', node.object, node.name.lexeme, node.value)
    if isinstance(node, This):
        return 'this'
    if isinstance(node, Super):
        return parenthesize('super', node.method.lexeme)

    # Statements
    if isinstance(node, Expression):
        return parenthesize(';', node.expression)
    if isinstance(node, Print):
        return parenthesize('print', node.expression)
    if isinstance(node, Var):
        if node.initializer is None:
            return parenthesize('var', node.name.lexeme)
        return parenthesize('var', node.name.lexeme, node.initializer)
    if isinstance(node, Block):
        return parenthesize('block', *node.statements)
    if isinstance(node, If):
        if node.else_branch is None:
            return parenthesize('if', node.condition, node.then_branch)
        return parenthesize('if', node.condition, node.then_branch, node.else_branch)
    if isinstance(node, While):
        return parenthesize('while', node.condition, node.body)
    if isinstance(node, Function):
        params = '(' + ' '.join(p.lexeme for p in node.params) + ')'
        return parenthesize('fun', node.name.lexeme, params, *node.body)
    if isinstance(node, Return):
        if node.value is None:
            return parenthesize('return')
        return parenthesize('return', node.value)
    if isinstance(node, Class):
        head = node.name.lexeme
        if node.superclass is not None:
            head += ' < ' + node.superclass.name.lexeme
        return parenthesize('class', head, *node.methods)
    raise NotImplementedError(f"print_ast: unexpected node type {type(node)}")
