"""JSON serialization/deserialization for the Lox AST.

This module converts between Lox AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Every node and token
survives a round trip. Loaded nodes are new objects, so a loaded program
has to be resolved again before it is executed.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict, Type

from . import ast as lox_ast
from .tokens import Token, TokenType

NODE_TYPES: Dict[str, Type[lox_ast.Node]] = {
    cls.__name__: cls
    for cls in (
        lox_ast.Literal, lox_ast.Unary, lox_ast.Binary, lox_ast.Logical,
        lox_ast.Grouping, lox_ast.Variable, lox_ast.Assign, lox_ast.Call,
        lox_ast.Get, lox_ast.Set, lox_ast.This, lox_ast.Super,
        lox_ast.Expression, lox_ast.Print, lox_ast.Var, lox_ast.Block,
        lox_ast.If, lox_ast.While, lox_ast.Function, lox_ast.Return,
        lox_ast.Class,
    )
}


def token_to_obj(token: Token) -> Dict[str, Any]:
    return {
        "__token__": token.type.name,
        "lexeme": token.lexeme,
        "literal": token.literal,
        "line": token.line,
    }


def token_from_obj(o: Dict[str, Any]) -> Token:
    return Token(TokenType[o["__token__"]], o["lexeme"], o["literal"], o["line"])


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None:
        return None
    if isinstance(node, (int, float, str, bool)):
        return node
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]
    if isinstance(node, Token):
        return token_to_obj(node)
    if isinstance(node, lox_ast.Node):
        obj: Dict[str, Any] = {"type": type(node).__name__}
        for f in fields(node):
            obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj
    raise TypeError(f"cannot serialize {type(node).__name__}")


def ast_from_obj(o: Any) -> Any:
    if o is None or isinstance(o, (int, float, str, bool)):
        return o
    if isinstance(o, list):
        return [ast_from_obj(x) for x in o]
    if isinstance(o, dict):
        if "__token__" in o:
            return token_from_obj(o)
        t = o.get("type")
        if t not in NODE_TYPES:
            raise ValueError(f"Unknown node type in JSON: {t}")
        cls = NODE_TYPES[t]
        kwargs = {f.name: ast_from_obj(o.get(f.name)) for f in fields(cls)}
        return cls(**kwargs)
    raise ValueError(f"Unsupported JSON value: {o!r}")
