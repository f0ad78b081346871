"""Tau: the async dialect.

Tau adds future handling on top of Rho. Futures are passive values that
only change when a line explicitly stores a new state:

    f = async fetch       -> binds f to Future(Pending)
    await f               -> error: Future still pending
    resolve f 40 + 2      -> f becomes Future(Resolved(Num(42.0)))
    await f               -> Num(42.0)
    reject g "timeout"    -> g becomes Future(Rejected('timeout'))

Any other line is evaluated as Rho.
"""

from __future__ import annotations

import re
from typing import Optional

from .environment import Environment
from .errors import ErrorVal, TrilangError, type_error
from .rho import eval_rho
from .runtime import Runtime
from .types import FutureVal, PENDING, RESOLVED, StrVal, Value, copy_value, type_name

ASYNC_RE = re.compile(r'^async\s')
BIND_ASYNC_RE = re.compile(r'^([A-Za-z_]\w*)\s*=\s*async\s')
AWAIT_RE = re.compile(r'^await\s+(\S+)$')
SETTLE_RE = re.compile(r'^(resolve|reject)\s+([A-Za-z_]\w*)\s+(.+)$')


def future_error(message: str) -> TrilangError:
    return TrilangError(ErrorVal('FutureError', message))


def await_value(value: Value) -> Value:
    """Unwrap a future; values that are not futures pass through unchanged."""
    if isinstance(value, FutureVal):
        if value.state == RESOLVED:
            return copy_value(value.value)
        if value.state == PENDING:
            raise future_error('Future still pending')
        raise future_error(value.message)
    return value


def settle(name: str, outcome: FutureVal, env: Environment) -> Value:
    if name not in env:
        raise TrilangError(ErrorVal('NameError', f'Variable {name} not found'))
    current = env.get(name)
    if not isinstance(current, FutureVal):
        raise type_error(f'{name} holds a {type_name(current)}, not a Future')
    if current.state != PENDING:
        raise future_error(f'Future {name} is already {current.state.lower()}')
    env.set(name, outcome)
    return outcome


def eval_tau(line: str, runtime: Runtime, env: Optional[Environment] = None) -> Value:
    if env is None:
        env = Environment()
    text = line.strip()

    # The operation text after `async` is not run; it only labels the future
    if ASYNC_RE.match(text):
        return FutureVal.pending()

    match = BIND_ASYNC_RE.match(text)
    if match:
        future = FutureVal.pending()
        env.set(match.group(1), future)
        return future

    match = AWAIT_RE.match(text)
    if match:
        name = match.group(1)
        if name not in env:
            raise TrilangError(ErrorVal('NameError', f'Variable {name} not found'))
        return await_value(env.get(name))

    match = SETTLE_RE.match(text)
    if match:
        verb, name, source = match.groups()
        value = eval_rho(source, runtime, env)
        if verb == 'resolve':
            return settle(name, FutureVal.resolved(value), env)
        if not isinstance(value, StrVal):
            raise type_error(f'reject expects a Str message, got {type_name(value)}')
        return settle(name, FutureVal.rejected(value.value), env)

    return eval_rho(line, runtime, env)
