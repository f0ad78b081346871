"""Rho: infix notation with tab-indented blocks."""

from typing import Optional

from .environment import Environment
from .parser import parse_rho
from .runtime import Runtime
from .types import Value


def eval_rho(source: str, runtime: Runtime, env: Optional[Environment] = None) -> Value:
    """Parse and evaluate Rho source, returning the last statement's value."""
    return runtime.evaluate(parse_rho(source), env)
