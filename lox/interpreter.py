"""Tree-walking interpreter for the Lox language.

`Interpreter` executes resolved statements directly. Statements and
expressions are dispatched on their node class; every variable access
consults the depth table filled in by the resolver, falling back to the
global environment for names the resolver left unresolved.

A `return` statement does not raise: `execute` hands a `ReturnSignal`
back up through blocks and loops until `call_function` consumes it.
Only `LoxRuntimeError` unwinds as an exception, so the two can never be
confused.

The module also provides `run_program` and `run_file`, which drive the
whole pipeline (lex, parse, resolve, execute) for one piece of source.
"""

from __future__ import annotations

import math
import sys
import time
import weakref
from typing import Any, Dict, List, MutableMapping, Optional, TextIO

from .ast import (
    Assign, Binary, Block, Call, Class, Expr, Expression, Function, Get,
    Grouping, If, Literal, Logical, Print, Return, Set, Stmt, Super, This,
    Unary, Var, Variable, While, first_line,
)
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import ErrorReporter, LoxRuntimeError, ReturnSignal
from .lexer import tokenize
from .parser import Parser
from .resolver import Resolver
from .tokens import Token, TokenType
from .types import (
    ClassValue, FunctionValue, InstanceValue, equal_values, is_number,
    is_truthy, to_string, type_name,
)

# One Lox call costs about half a dozen Python frames; this leaves room for
# recursion a couple of thousand calls deep.
RECURSION_LIMIT = 15_000


def raise_recursion_limit(limit: int = RECURSION_LIMIT) -> None:
    if sys.getrecursionlimit() < limit:
        sys.setrecursionlimit(limit)


class Interpreter:
    """Core interpreter that executes Lox ASTs.

    An interpreter is stateful: globals and resolved depths persist across
    calls to `run`, which is what lets a REPL session refer back to
    earlier definitions.
    """
    def __init__(self, reporter: Optional[ErrorReporter] = None, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.reporter = reporter if reporter is not None else ErrorReporter()
        self.globals = Environment()
        self.environment = self.globals
        # keyed by node identity; entries vanish with their nodes
        self.locals: MutableMapping[Expr, int] = weakref.WeakKeyDictionary()
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp: Optional[TextIO] = None
        raise_recursion_limit()
        self.load_standard_module()

    def debug(self, msg: str) -> None:
        if self.debug_level > 0:
            if self.debug_fp is None:
                self.debug_fp = open(self.debug_file, 'w', encoding='utf-8')
            self.debug_fp.write(msg + '\n')
            self.debug_fp.flush()

    def close(self) -> None:
        if self.debug_fp is not None:
            self.debug_fp.close()
            self.debug_fp = None

    def load_standard_module(self) -> None:
        def std_clock(args: List[Any]) -> Any:
            return time.time()

        self.globals.define('clock', BuiltinFunction('clock', 0, std_clock))

    # Public API

    def run(self, source: str) -> ErrorReporter:
        """Lex, parse, resolve and execute one piece of source.

        Nothing is executed if any static error was reported. Returns the
        reporter so callers can inspect the error flags.
        """
        tokens = tokenize(source, self.reporter)
        self.debug(f"scanned {len(tokens)} tokens")
        statements = Parser(tokens, self.reporter).parse()
        self.debug(f"parsed {len(statements)} statements")
        if self.reporter.had_error:
            return self.reporter
        self.resolve(statements)
        if self.reporter.had_error:
            return self.reporter
        self.interpret(statements)
        return self.reporter

    def resolve(self, statements: List[Optional[Stmt]]) -> None:
        before = len(self.locals)
        Resolver(self.locals, self.reporter).resolve_program(statements)
        self.debug(f"resolved {len(self.locals) - before} local references")

    def interpret(self, statements: List[Optional[Stmt]]) -> None:
        try:
            for stmt in statements:
                if stmt is None:
                    continue
                try:
                    self.execute(stmt)
                except RecursionError:
                    # too deep outside any call, e.g. a huge operator chain
                    raise LoxRuntimeError(None, 'Stack overflow.', first_line(stmt)) from None
        except LoxRuntimeError as error:
            self.debug(f"runtime error: {error.message}")
            self.reporter.runtime_error(error)

    # Statements

    def execute_block(self, statements: List[Optional[Stmt]], env: Environment) -> Optional[ReturnSignal]:
        previous = self.environment
        try:
            self.environment = env
            for stmt in statements:
                if stmt is None:
                    continue
                result = self.execute(stmt)
                # propagate return signals
                if result is not None:
                    return result
            return None
        finally:
            self.environment = previous

    def execute(self, node: Stmt) -> Optional[ReturnSignal]:
        if isinstance(node, Expression):
            self.evaluate(node.expression)
            return None
        if isinstance(node, Print):
            value = self.evaluate(node.expression)
            print(to_string(value))
            return None
        if isinstance(node, Var):
            value = None
            if node.initializer is not None:
                value = self.evaluate(node.initializer)
            self.environment.define(node.name.lexeme, value)
            if self.debug_level >= 2:
                self.debug(f"declare {node.name.lexeme}: {type_name(value)} = {to_string(value)}")
            return None
        if isinstance(node, Block):
            return self.execute_block(node.statements, Environment(self.environment))
        if isinstance(node, If):
            cond = self.evaluate(node.condition)
            truthy = is_truthy(cond)
            if self.debug_level >= 3:
                self.debug(f"if condition {to_string(cond)} -> {truthy}")
            if truthy:
                return self.execute(node.then_branch)
            if node.else_branch is not None:
                return self.execute(node.else_branch)
            return None
        if isinstance(node, While):
            while is_truthy(self.evaluate(node.condition)):
                result = self.execute(node.body)
                if result is not None:
                    return result
            return None
        if isinstance(node, Function):
            function = FunctionValue(node, self.environment)
            self.environment.define(node.name.lexeme, function)
            if self.debug_level >= 2:
                self.debug(f"define function {node.name.lexeme}")
            return None
        if isinstance(node, Return):
            value = None
            if node.value is not None:
                value = self.evaluate(node.value)
            return ReturnSignal(value)
        if isinstance(node, Class):
            self.execute_class(node)
            return None
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def execute_class(self, node: Class) -> None:
        superclass = None
        if node.superclass is not None:
            superclass = self.evaluate(node.superclass)
            if not isinstance(superclass, ClassValue):
                raise LoxRuntimeError(node.superclass.name, 'Superclass must be a class.')

        self.environment.define(node.name.lexeme, None)

        if superclass is not None:
            self.environment = Environment(self.environment)
            self.environment.define('super', superclass)

        methods: Dict[str, FunctionValue] = {}
        for method in node.methods:
            is_initializer = method.name.lexeme == 'init'
            methods[method.name.lexeme] = FunctionValue(method, self.environment, is_initializer)

        klass = ClassValue(node.name.lexeme, superclass, methods)

        if superclass is not None:
            self.environment = self.environment.enclosing

        self.environment.assign(node.name, klass)
        if self.debug_level >= 2:
            parent = f" < {superclass.name}" if superclass is not None else ''
            self.debug(f"define class {klass.name}{parent} methods={sorted(methods)}")

    # Expressions

    def evaluate(self, node: Expr) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Grouping):
            return self.evaluate(node.expression)
        if isinstance(node, Unary):
            right = self.evaluate(node.right)
            if node.operator.type == TokenType.MINUS:
                check_number_operand(node.operator, right)
                return -right
            if node.operator.type == TokenType.BANG:
                return not is_truthy(right)
            raise LoxRuntimeError(node.operator, 'Unknown unary operator.')
        if isinstance(node, Binary):
            left = self.evaluate(node.left)
            right = self.evaluate(node.right)
            return apply_binary_op(node.operator, left, right)
        if isinstance(node, Logical):
            left = self.evaluate(node.left)
            if node.operator.type == TokenType.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(node.right)
        if isinstance(node, Variable):
            return self.look_up_variable(node.name, node)
        if isinstance(node, Assign):
            value = self.evaluate(node.value)
            distance = self.locals.get(node)
            if distance is not None:
                self.environment.assign_at(distance, node.name, value)
            else:
                self.globals.assign(node.name, value)
            return value
        if isinstance(node, Call):
            callee = self.evaluate(node.callee)
            args = [self.evaluate(arg) for arg in node.arguments]
            try:
                return self.call_function(callee, args, node.paren)
            except RecursionError:
                raise LoxRuntimeError(node.paren, 'Stack overflow.') from None
        if isinstance(node, Get):
            obj = self.evaluate(node.object)
            if isinstance(obj, InstanceValue):
                return obj.get(node.name)
            raise LoxRuntimeError(node.name, 'Only instances have properties.')
        if isinstance(node, Set):
            obj = self.evaluate(node.object)
            if not isinstance(obj, InstanceValue):
                raise LoxRuntimeError(node.name, 'Only instances have fields.')
            value = self.evaluate(node.value)
            obj.set(node.name, value)
            return value
        if isinstance(node, This):
            return self.look_up_variable(node.keyword, node)
        if isinstance(node, Super):
            return self.evaluate_super(node)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def evaluate_super(self, node: Super) -> FunctionValue:
        distance = self.locals[node]
        superclass: ClassValue = self.environment.get_at(distance, 'super')
        # `this` always sits in the scope just inside the one holding `super`
        instance: InstanceValue = self.environment.get_at(distance - 1, 'this')
        method = superclass.find_method(node.method.lexeme)
        if method is None:
            raise LoxRuntimeError(node.method, f"Undefined property '{node.method.lexeme}'.")
        return method.bind(instance)

    def look_up_variable(self, name: Token, node: Expr) -> Any:
        distance = self.locals.get(node)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    # Calls

    def call_function(self, callee: Any, args: List[Any], paren: Token) -> Any:
        if isinstance(callee, BuiltinFunction):
            check_arity(paren, callee.arity, len(args))
            return callee.fn(args)
        if isinstance(callee, FunctionValue):
            check_arity(paren, callee.arity, len(args))
            if self.debug_level >= 3:
                self.debug(f"call {callee.name}({', '.join(to_string(a) for a in args)}) [line {paren.line}]")
            call_env = Environment(callee.closure)
            for param, arg in zip(callee.declaration.params, args):
                call_env.define(param.lexeme, arg)
            result = self.execute_block(callee.declaration.body, call_env)
            if callee.is_initializer:
                # init always yields the instance, even after a bare return
                return callee.closure.get_at(0, 'this')
            if result is not None:
                return result.value
            return None
        if isinstance(callee, ClassValue):
            check_arity(paren, callee.arity, len(args))
            instance = InstanceValue(callee)
            initializer = callee.find_method('init')
            if initializer is not None:
                self.call_function(initializer.bind(instance), args, paren)
            return instance
        raise LoxRuntimeError(paren, 'Can only call functions and classes.')


def check_arity(paren: Token, expected: int, got: int) -> None:
    if expected != got:
        raise LoxRuntimeError(paren, f"Expected {expected} arguments but got {got}.")


def check_number_operand(operator: Token, operand: Any) -> None:
    if not is_number(operand):
        raise LoxRuntimeError(operator, 'Operand must be a number.')


def check_number_operands(operator: Token, left: Any, right: Any) -> None:
    if not (is_number(left) and is_number(right)):
        raise LoxRuntimeError(operator, 'Operands must be numbers.')


def apply_binary_op(operator: Token, a: Any, b: Any) -> Any:
    op = operator.type
    if op == TokenType.PLUS:
        if is_number(a) and is_number(b):
            return a + b
        if isinstance(a, str) and isinstance(b, str):
            return a + b
        raise LoxRuntimeError(operator, 'Operands must be two numbers or two strings.')
    if op == TokenType.EQUAL_EQUAL:
        return equal_values(a, b)
    if op == TokenType.BANG_EQUAL:
        return not equal_values(a, b)
    check_number_operands(operator, a, b)
    if op == TokenType.MINUS:
        return a - b
    if op == TokenType.STAR:
        return a * b
    if op == TokenType.SLASH:
        return divide(a, b)
    if op == TokenType.GREATER:
        return a > b
    if op == TokenType.GREATER_EQUAL:
        return a >= b
    if op == TokenType.LESS:
        return a < b
    if op == TokenType.LESS_EQUAL:
        return a <= b
    raise LoxRuntimeError(operator, 'Unknown binary operator.')


def divide(a: float, b: float) -> float:
    """IEEE-754 division: dividing by zero gives an infinity or NaN."""
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def run_program(source: str, interpreter: Optional[Interpreter] = None) -> ErrorReporter:
    """Convenience function to run a Lox program from a source string."""
    if interpreter is None:
        interpreter = Interpreter()
    return interpreter.run(source)


def run_file(file_path: str, debug_level: int = 0) -> Interpreter:
    """Run a Lox file, returning the interpreter instance."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    interpreter = Interpreter(debug_level=debug_level)
    try:
        interpreter.run(source)
    finally:
        interpreter.close()
    return interpreter
