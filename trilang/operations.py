"""Operations on Trilang values.

Each binary operation takes two values, never mutates them and returns a
new value. Unsupported variant pairs raise a `TrilangError` whose message
names both variants, e.g. ``cannot add Num and Str``.
"""

from __future__ import annotations

import sys
from typing import Any

from .errors import ErrorVal, TrilangError, type_error
from .types import (
    NumVal, BoolVal, StrVal, UnitVal, ColorVal, ArrayVal,
    Value, copy_value, type_name,
)


def _mismatch(verb: str, a: Value, b: Value) -> TrilangError:
    return type_error(f"cannot {verb} {type_name(a)} and {type_name(b)}")


def add(a: Value, b: Value) -> Value:
    if isinstance(a, NumVal) and isinstance(b, NumVal):
        return NumVal(a.value + b.value)
    if isinstance(a, ColorVal) and isinstance(b, ColorVal):
        return ColorVal(a.color.add(b.color))
    if isinstance(a, ArrayVal) and isinstance(b, ArrayVal):
        return ArrayVal([copy_value(item) for item in a.items + b.items])
    raise _mismatch('add', a, b)


def sub(a: Value, b: Value) -> Value:
    if isinstance(a, NumVal) and isinstance(b, NumVal):
        return NumVal(a.value - b.value)
    if isinstance(a, ColorVal) and isinstance(b, ColorVal):
        return ColorVal(a.color.sub(b.color))
    raise _mismatch('subtract', a, b)


def mul(a: Value, b: Value) -> Value:
    if isinstance(a, NumVal) and isinstance(b, NumVal):
        return NumVal(a.value * b.value)
    raise _mismatch('multiply', a, b)


def div(a: Value, b: Value) -> Value:
    if isinstance(a, NumVal) and isinstance(b, NumVal):
        if b.value == 0.0:
            raise TrilangError(ErrorVal('ArithmeticError', 'division by zero'))
        return NumVal(a.value / b.value)
    raise _mismatch('divide', a, b)


def blend(a: Value, b: Value) -> Value:
    if isinstance(a, ColorVal) and isinstance(b, ColorVal):
        return ColorVal(a.color.blend(b.color))
    raise _mismatch('blend', a, b)


def scale(a: Value, factor: float) -> Value:
    if isinstance(a, ColorVal):
        return ColorVal(a.color.scale(factor))
    raise type_error(f"cannot scale {type_name(a)}")


def mix(a: Value, b: Value, ratio: Value) -> Value:
    if not (isinstance(a, ColorVal) and isinstance(b, ColorVal)):
        raise _mismatch('mix', a, b)
    if not isinstance(ratio, NumVal):
        raise type_error(f"mix ratio must be a Num, got {type_name(ratio)}")
    return ColorVal(a.color.mix(b.color, ratio.value))


def less_than(a: Value, b: Value) -> Value:
    if isinstance(a, NumVal) and isinstance(b, NumVal):
        return BoolVal(a.value < b.value)
    raise _mismatch('compare', a, b)


def greater_than(a: Value, b: Value) -> Value:
    if isinstance(a, NumVal) and isinstance(b, NumVal):
        return BoolVal(a.value > b.value)
    raise _mismatch('compare', a, b)


def equals(a: Value, b: Value) -> Value:
    """Compare like variants; any other pairing is simply false."""
    if isinstance(a, NumVal) and isinstance(b, NumVal):
        return BoolVal(abs(a.value - b.value) < sys.float_info.epsilon)
    if isinstance(a, BoolVal) and isinstance(b, BoolVal):
        return BoolVal(a.value == b.value)
    if isinstance(a, StrVal) and isinstance(b, StrVal):
        return BoolVal(a.value == b.value)
    return BoolVal(False)


def is_truthy(value: Any) -> bool:
    if isinstance(value, BoolVal):
        return value.value
    if isinstance(value, NumVal):
        return value.value != 0.0
    if isinstance(value, UnitVal):
        return False
    return True


def keys_match(key: Value, probe: Value) -> bool:
    """Key equality used by map lookup: numbers within epsilon, strings exactly."""
    if isinstance(key, NumVal) and isinstance(probe, NumVal):
        return abs(key.value - probe.value) < sys.float_info.epsilon
    if isinstance(key, StrVal) and isinstance(probe, StrVal):
        return key.value == probe.value
    return False


BINARY_OPS = {
    '+': add,
    '-': sub,
    '*': mul,
    '/': div,
    '<': less_than,
    '>': greater_than,
    '==': equals,
    'blend': blend,
}


def apply_binary_op(op: str, a: Value, b: Value) -> Value:
    try:
        fn = BINARY_OPS[op]
    except KeyError:
        raise type_error(f"unknown operator {op}")
    return fn(a, b)
