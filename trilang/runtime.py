"""Evaluator and control-flow runtime for Trilang.

`Runtime.evaluate` walks an expression tree depth first, always
evaluating the left operand before the right one. Errors raised by value
operations propagate straight out of the walk as `TrilangError`; nothing
that already happened during the failing call is rolled back, so an
assignment or a continuation push made before the error stays in effect.

The runtime also owns the continuation stack. It is explicit state,
independent of the evaluator's own recursion, and is changed only by the
four control-flow operations:

* ``resume``: pop the top continuation and run it (Unit when empty).
* ``break``: discard the whole stack.
* ``continue``: push a continuation and resume it immediately.
* ``c1 ; c2``: push c2 then c1, so two resumes run c1 before c2.
"""

from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional

from .ast import (
    Expr, Literal, Var, Assign, ArrayLit, MapLit, BinaryOp, Scale, Mix,
    Get, Compose, Choice, Block, While, For, If, Call, Suspend,
    Resume, Break, Continue,
)
from .builtin_function import BuiltinFunction
from .continuations import ContinuationStack
from .environment import Environment
from .errors import ErrorVal, TrilangError, type_error
from .operations import apply_binary_op, is_truthy, keys_match, mix, scale
from .types import (
    UNIT, UnitVal, NumVal, StrVal, ArrayVal, MapVal, ContinuationVal,
    Value, copy_value, to_string, type_name,
)


def truncate_index(n: float) -> int:
    """Truncate a numeric index toward zero, saturating at 0."""
    if n != n or n <= 0:
        return 0
    if n == float('inf'):
        return sys.maxsize
    return int(n)


class Runtime:
    """Evaluates expression trees and manages the continuation stack."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.cont_stack = ContinuationStack()
        self.builtins: Dict[str, BuiltinFunction] = {}
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 else None
        self.load_builtins()

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def load_builtins(self):
        # Built-in functions: print, len, type

        def builtin_print(args: List[Any]) -> Any:
            print(' '.join(to_string(a) for a in args))
            return UNIT

        def builtin_len(args: List[Any]) -> Any:
            value = args[0]
            if isinstance(value, ArrayVal):
                return NumVal(float(len(value.items)))
            if isinstance(value, MapVal):
                return NumVal(float(len(value.pairs)))
            if isinstance(value, StrVal):
                return NumVal(float(len(value.value)))
            raise type_error(f'len expects an Array, Map or Str, got {type_name(value)}')

        def builtin_type(args: List[Any]) -> Any:
            return StrVal(type_name(args[0]))

        self.builtins['print'] = BuiltinFunction('print', None, builtin_print)
        self.builtins['len'] = BuiltinFunction('len', 1, builtin_len)
        self.builtins['type'] = BuiltinFunction('type', 1, builtin_type)

    # Control flow

    def resume(self) -> Value:
        cont = self.cont_stack.pop()
        if cont is None:
            self.debug('resume: stack empty')
            return UNIT
        self.debug(f'resume {cont!r}, {len(self.cont_stack)} left')
        return cont.invoke()

    def break_flow(self) -> Value:
        self.debug(f'break: dropping {len(self.cont_stack)} continuations')
        self.cont_stack.clear()
        return UNIT

    def continue_with(self, value: Value) -> Value:
        if not isinstance(value, ContinuationVal):
            # anything but a continuation is ignored
            return UNIT
        self.cont_stack.push(value)
        self.debug(f'continue: pushed {value!r}')
        return self.resume()

    # Evaluation

    def evaluate(self, node: Expr, env: Optional[Environment] = None) -> Value:
        if env is None:
            env = Environment()
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Var):
            return env.get(node.name)
        if isinstance(node, Assign):
            value = self.evaluate(node.value, env)
            env.set(node.name, value)
            if self.debug_level >= 2:
                self.debug(f"assign {node.name} = {value!r}")
            return value
        if isinstance(node, ArrayLit):
            return ArrayVal([self.evaluate(el, env) for el in node.elements])
        if isinstance(node, MapLit):
            pairs = []
            for key_node, val_node in node.entries:
                key = self.evaluate(key_node, env)
                pairs.append((key, self.evaluate(val_node, env)))
            return MapVal(pairs)
        if isinstance(node, BinaryOp):
            left = self.evaluate(node.left, env)
            right = self.evaluate(node.right, env)
            return apply_binary_op(node.op, left, right)
        if isinstance(node, Scale):
            return scale(self.evaluate(node.target, env), node.factor)
        if isinstance(node, Mix):
            left = self.evaluate(node.left, env)
            right = self.evaluate(node.right, env)
            return mix(left, right, self.evaluate(node.ratio, env))
        if isinstance(node, Get):
            container = self.evaluate(node.target, env)
            index = self.evaluate(node.index, env)
            return self.get_item(container, index)
        if isinstance(node, Compose):
            first = self.evaluate(node.left, env)
            second = self.evaluate(node.right, env)
            if not (isinstance(first, ContinuationVal) and isinstance(second, ContinuationVal)):
                raise type_error(
                    f'compose requires two continuations, got {type_name(first)} and {type_name(second)}'
                )
            # second goes in first so that the next resume runs `first`
            self.cont_stack.push(second)
            self.cont_stack.push(first)
            self.debug(f'compose: pushed 2, depth {len(self.cont_stack)}')
            return UNIT
        if isinstance(node, Choice):
            first = self.evaluate(node.left, env)
            if isinstance(first, UnitVal):
                return self.evaluate(node.right, env)
            return first
        if isinstance(node, Block):
            result: Value = UNIT
            for child in node.body:
                result = self.evaluate(child, env)
            return result
        if isinstance(node, While):
            result = UNIT
            while True:
                cond = self.evaluate(node.condition, env)
                truthy = is_truthy(cond)
                if self.debug_level >= 3:
                    self.debug(f"while condition {cond!r} -> {truthy}")
                if not truthy:
                    break
                result = self.evaluate(node.body, env)
            return result
        if isinstance(node, For):
            iterable = self.evaluate(node.iterable, env)
            if not isinstance(iterable, ArrayVal):
                raise type_error(f'for loop requires an Array, got {type_name(iterable)}')
            result = UNIT
            for item in list(iterable.items):
                env.set(node.name, item)
                if self.debug_level >= 2:
                    self.debug(f"for {node.name} = {item!r}")
                result = self.evaluate(node.body, env)
            return result
        if isinstance(node, If):
            cond = self.evaluate(node.condition, env)
            truthy = is_truthy(cond)
            if self.debug_level >= 3:
                self.debug(f"if condition {cond!r} -> {truthy}")
            if truthy:
                return self.evaluate(node.then_branch, env)
            if node.else_branch is not None:
                return self.evaluate(node.else_branch, env)
            return UNIT
        if isinstance(node, Call):
            return self.call_builtin(node.name, [self.evaluate(arg, env) for arg in node.args])
        if isinstance(node, Suspend):
            body = node.body
            return ContinuationVal(lambda: self.evaluate(body, env))
        if isinstance(node, Resume):
            return self.resume()
        if isinstance(node, Break):
            return self.break_flow()
        if isinstance(node, Continue):
            return self.continue_with(self.evaluate(node.arg, env))
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def get_item(self, container: Value, index: Value) -> Value:
        if isinstance(container, ArrayVal):
            if not isinstance(index, NumVal):
                raise type_error(f'array index must be a Num, got {type_name(index)}')
            i = truncate_index(index.value)
            if i >= len(container.items):
                raise TrilangError(ErrorVal('IndexError', f'index {i} out of bounds'))
            return copy_value(container.items[i])
        if isinstance(container, MapVal):
            for key, value in container.pairs:
                if keys_match(key, index):
                    return copy_value(value)
            raise TrilangError(ErrorVal('KeyError', f'key {index!r} not found in map'))
        raise type_error(f'get requires an Array or Map, got {type_name(container)}')

    def call_builtin(self, name: str, args: List[Value]) -> Value:
        func = self.builtins.get(name)
        if func is None:
            raise TrilangError(ErrorVal('NameError', f'undefined function {name}'))
        # Check arity; None means variadic
        if func.arity is not None and len(args) != func.arity:
            raise type_error(f"{func.name} expects {func.arity} arguments")
        return func.fn(args)
