"""Runtime values and value helpers for Lox.

Lox values map onto Python objects as follows:

    nil       -> None
    booleans  -> bool
    numbers   -> float (always; never int)
    strings   -> str
    functions -> FunctionValue or BuiltinFunction
    classes   -> ClassValue
    instances -> InstanceValue

Because `bool` is a subclass of `int` in Python and `True == 1.0`, the
helpers below check types explicitly instead of leaning on Python's own
equality and truthiness.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional

from .ast import Function
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import LoxRuntimeError
from .tokens import Token


class FunctionValue:
    """A user-defined function or method together with its closure."""
    def __init__(self, declaration: Function, closure: Environment, is_initializer: bool = False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    @property
    def arity(self) -> int:
        return len(self.declaration.params)

    def bind(self, instance: 'InstanceValue') -> 'FunctionValue':
        """Return a copy of this method whose closure defines `this`."""
        env = Environment(self.closure)
        env.define('this', instance)
        return FunctionValue(self.declaration, env, self.is_initializer)

    def __repr__(self) -> str:
        return f"<fn {self.name}>"


class ClassValue:
    def __init__(self, name: str, superclass: Optional['ClassValue'], methods: Dict[str, FunctionValue]):
        self.name = name
        self.superclass = superclass
        self.methods = methods

    def find_method(self, name: str) -> Optional[FunctionValue]:
        if name in self.methods:
            return self.methods[name]
        if self.superclass is not None:
            return self.superclass.find_method(name)
        return None

    @property
    def arity(self) -> int:
        initializer = self.find_method('init')
        return initializer.arity if initializer is not None else 0

    def __repr__(self) -> str:
        return self.name


class InstanceValue:
    def __init__(self, klass: ClassValue):
        self.klass = klass
        self.fields: Dict[str, Any] = {}

    def get(self, name: Token) -> Any:
        # fields shadow methods
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]
        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)
        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value: Any) -> None:
        self.fields[name.lexeme] = value

    def __repr__(self) -> str:
        return f"{self.klass.name} instance"


def is_number(value: Any) -> bool:
    return isinstance(value, float)


def is_truthy(value: Any) -> bool:
    """Only nil and false are falsy; 0 and the empty string are truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def equal_values(a: Any, b: Any) -> bool:
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, float) and isinstance(b, float):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    # functions, classes and instances compare by identity
    return a is b


def format_number(value: float) -> str:
    if math.isfinite(value) and value.is_integer():
        if value == 0 and math.copysign(1.0, value) < 0:
            return '-0'
        return str(int(value))
    return repr(value)


def to_string(value: Any) -> str:
    """Convert a Lox value to the text `print` writes for it."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, str):
        return value
    return repr(value)


def type_name(value: Any) -> str:
    """Return a short name for the kind of a runtime value (used in traces)."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, float):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, BuiltinFunction):
        return 'native function'
    if isinstance(value, FunctionValue):
        return 'function'
    if isinstance(value, ClassValue):
        return 'class'
    if isinstance(value, InstanceValue):
        return 'instance'
    return type(value).__name__
