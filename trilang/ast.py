"""Expression tree definitions for Trilang.

The readers build these nodes and hand them to `Runtime.evaluate`. Nodes
are immutable; a tree is built once per input line, evaluated and then
discarded. Statements such as loops and assignments are expressions too:
every node evaluates to a value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class Expr:
    """Base class for all expression nodes."""
    pass


@dataclass(frozen=True)
class Literal(Expr):
    value: Any  # a trilang.types value


@dataclass(frozen=True)
class Var(Expr):
    name: str


@dataclass(frozen=True)
class Assign(Expr):
    name: str
    value: Expr


@dataclass(frozen=True)
class ArrayLit(Expr):
    elements: Tuple[Expr, ...]


@dataclass(frozen=True)
class MapLit(Expr):
    entries: Tuple[Tuple[Expr, Expr], ...]


@dataclass(frozen=True)
class BinaryOp(Expr):
    op: str  # one of + - * / < > == blend
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Scale(Expr):
    target: Expr
    factor: float


@dataclass(frozen=True)
class Mix(Expr):
    left: Expr
    right: Expr
    ratio: Expr


@dataclass(frozen=True)
class Get(Expr):
    target: Expr
    index: Expr


@dataclass(frozen=True)
class Compose(Expr):
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Choice(Expr):
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Block(Expr):
    body: Tuple[Expr, ...]


@dataclass(frozen=True)
class While(Expr):
    condition: Expr
    body: Expr


@dataclass(frozen=True)
class For(Expr):
    name: str
    iterable: Expr
    body: Expr


@dataclass(frozen=True)
class If(Expr):
    condition: Expr
    then_branch: Expr
    else_branch: Optional[Expr] = None


@dataclass(frozen=True)
class Call(Expr):
    name: str
    args: Tuple[Expr, ...]


@dataclass(frozen=True)
class Suspend(Expr):
    body: Expr


@dataclass(frozen=True)
class Resume(Expr):
    pass


@dataclass(frozen=True)
class Break(Expr):
    pass


@dataclass(frozen=True)
class Continue(Expr):
    arg: Expr
