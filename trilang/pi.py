"""Pi: postfix (reverse Polish) notation.

A Pi line is a whitespace-separated sequence of tokens evaluated over a
value stack::

    3 4 +                 -> Num(7.0)
    5 "x" =               -> binds x to Num(5.0) and leaves it on the stack
    [1,2,3] -->           -> prints each element, leaves Unit
    color(255,0,0) color(0,0,255) blend

Operators are handed to the runtime as small expression trees, so they
share the evaluator's semantics and error messages.
"""

from __future__ import annotations

from typing import List, Optional

from .ast import BinaryOp, Get, Literal, Scale
from .environment import Environment
from .errors import ErrorVal, TrilangError, type_error
from .parser import parse_constant
from .runtime import Runtime
from .types import UNIT, ArrayVal, NumVal, StrVal, Value

BINARY_TOKENS = ('+', '-', '*', '/', '<', '>', '==', 'blend')


def stack_error(message: str) -> TrilangError:
    return TrilangError(ErrorVal('StackError', message))


def pop_operands(stack: List[Value], count: int, token: str) -> List[Value]:
    if len(stack) < count:
        raise stack_error(f'not enough operands for {token}')
    operands = stack[-count:]
    del stack[-count:]
    return operands


def eval_pi(line: str, runtime: Runtime, env: Optional[Environment] = None) -> Value:
    """Evaluate one line of Pi and return the single value left on the stack."""
    if env is None:
        env = Environment()
    stack: List[Value] = []

    for token in line.split():
        if token in BINARY_TOKENS:
            a, b = pop_operands(stack, 2, token)
            stack.append(runtime.evaluate(BinaryOp(token, Literal(a), Literal(b)), env))
        elif token == 'get':
            container, index = pop_operands(stack, 2, token)
            stack.append(runtime.evaluate(Get(Literal(container), Literal(index)), env))
        elif token == 'scale':
            color, factor = pop_operands(stack, 2, token)
            if not isinstance(factor, NumVal):
                raise type_error('scale factor must be a number')
            stack.append(runtime.evaluate(Scale(Literal(color), factor.value), env))
        elif token == '=':
            # Variable assignment: value name =
            value, name = pop_operands(stack, 2, token)
            if not isinstance(name, StrVal):
                raise type_error('variable name must be a string')
            env.set(name.value, value)
            if runtime.debug_level >= 2:
                runtime.debug(f"assign {name.value} = {value!r}")
            stack.append(value)
        elif token == '-->':
            if not stack:
                raise stack_error('no value to print')
            value = stack.pop()
            if isinstance(value, ArrayVal):
                print(' '.join(repr(item) for item in value.items))
                stack.append(UNIT)
            else:
                stack.append(value)
        elif token == 'resume':
            stack.append(runtime.resume())
        elif token == 'break':
            stack.append(runtime.break_flow())
        elif token in env:
            stack.append(env.get(token))
        else:
            stack.append(runtime.evaluate(parse_constant(token), env))

    if len(stack) == 1:
        return stack[0]
    if not stack:
        return UNIT
    raise stack_error(f'stack has {len(stack)} values remaining')
