"""Runtime value model for Trilang.

Every value produced by the Pi, Rho and Tau readers is an instance of one
of the classes defined here. The set is closed: operations in
`trilang.operations` dispatch on these classes and raise a type error for
anything they do not handle.

Two variants need special care:

* `ColorVal` wraps an immutable `Color`, so colors have value semantics
  even though Python shares objects.
* `ContinuationVal` holds a suspended computation. It cannot be
  duplicated: `copy_value` turns it into `UNIT`. Code that copies a value
  and expects to invoke the continuation twice will silently lose it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Color:
    """An RGB color with three independent 8-bit channels.

    Channel arithmetic never wraps: addition saturates at 255,
    subtraction floors at 0 and scaling clamps to [0, 255].
    """
    r: int
    g: int
    b: int

    def __post_init__(self):
        for name in ('r', 'g', 'b'):
            channel = getattr(self, name)
            if not isinstance(channel, int) or isinstance(channel, bool) or not 0 <= channel <= 255:
                raise ValueError(f"invalid {name} value {channel!r}")

    def __repr__(self) -> str:
        return f"Color(r={self.r}, g={self.g}, b={self.b})"

    def channels(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def blend(self, other: 'Color') -> 'Color':
        return Color(*((a + b) // 2 for a, b in zip(self.channels(), other.channels())))

    def mix(self, other: 'Color', ratio: float) -> 'Color':
        ratio = _clamp(ratio, 0.0, 1.0)
        inv_ratio = 1.0 - ratio
        return Color(*(
            _to_channel(a * inv_ratio + b * ratio)
            for a, b in zip(self.channels(), other.channels())
        ))

    def add(self, other: 'Color') -> 'Color':
        return Color(*(min(a + b, 255) for a, b in zip(self.channels(), other.channels())))

    def sub(self, other: 'Color') -> 'Color':
        return Color(*(max(a - b, 0) for a, b in zip(self.channels(), other.channels())))

    def scale(self, factor: float) -> 'Color':
        return Color(*(_to_channel(_clamp(c * factor, 0.0, 255.0)) for c in self.channels()))


def _clamp(x: float, low: float, high: float) -> float:
    # NaN propagates; _to_channel maps it to 0
    if x != x:
        return x
    return max(low, min(high, x))


def _to_channel(x: float) -> int:
    """Truncate a float toward zero and saturate it into 0..255."""
    if x != x:
        return 0
    if x <= 0.0:
        return 0
    if x >= 255.0:
        return 255
    return int(x)


@dataclass(frozen=True)
class NumVal:
    value: float

    def __repr__(self) -> str:
        return f"Num({float(self.value)!r})"


@dataclass(frozen=True)
class BoolVal:
    value: bool

    def __repr__(self) -> str:
        return f"Bool({'true' if self.value else 'false'})"


@dataclass(frozen=True)
class StrVal:
    value: str

    def __repr__(self) -> str:
        escaped = self.value.replace('\\', '\\\\').replace('"', '\\"')
        return f'Str("{escaped}")'


class UnitVal:
    """Marker for the absence of a meaningful result. Use the `UNIT` instance."""
    _instance: Optional['UnitVal'] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, UnitVal)

    def __hash__(self) -> int:
        return hash('Unit')

    def __repr__(self) -> str:
        return 'Unit'


UNIT = UnitVal()


@dataclass(frozen=True)
class ColorVal:
    color: Color

    def __repr__(self) -> str:
        return repr(self.color)


@dataclass
class ArrayVal:
    """An ordered, heterogeneous sequence of values."""
    items: List[Any] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Array({self.items!r})"


@dataclass
class MapVal:
    """An ordered list of key/value pairs.

    This is not a hash map. Lookup scans the pairs in insertion order and
    the first matching key wins, so duplicate keys are allowed.
    """
    pairs: List[Tuple[Any, Any]] = field(default_factory=list)

    def __repr__(self) -> str:
        entries = ', '.join(f"({k!r}, {v!r})" for k, v in self.pairs)
        return f"Map([{entries}])"


PENDING = 'Pending'
RESOLVED = 'Resolved'
REJECTED = 'Rejected'


@dataclass(frozen=True)
class FutureVal:
    """A placeholder for a result that is not available yet.

    Futures are never polled or scheduled. They change state only when a
    front end stores a new future in place of the old one.
    """
    state: str
    value: Any = None
    message: Optional[str] = None

    @staticmethod
    def pending() -> 'FutureVal':
        return FutureVal(PENDING)

    @staticmethod
    def resolved(value: Any) -> 'FutureVal':
        return FutureVal(RESOLVED, value=value)

    @staticmethod
    def rejected(message: str) -> 'FutureVal':
        return FutureVal(REJECTED, message=message)

    def __repr__(self) -> str:
        if self.state == RESOLVED:
            return f"Future(Resolved({self.value!r}))"
        if self.state == REJECTED:
            return f"Future(Rejected({self.message!r}))"
        return 'Future(Pending)'


class ContinuationVal:
    """A suspended computation, or an empty marker when `fn` is None.

    The callable is consumed on first invocation; afterwards the
    continuation behaves like the empty kind.
    """

    def __init__(self, fn: Optional[Callable[[], Any]] = None):
        self.fn = fn

    @staticmethod
    def empty() -> 'ContinuationVal':
        return ContinuationVal(None)

    @property
    def is_empty(self) -> bool:
        return self.fn is None

    def invoke(self) -> Any:
        fn, self.fn = self.fn, None
        if fn is None:
            return UNIT
        return fn()

    def __repr__(self) -> str:
        return 'Continuation(Empty)' if self.fn is None else 'Continuation(Resume)'


Value = Union[NumVal, BoolVal, StrVal, UnitVal, ColorVal, ArrayVal, MapVal, FutureVal, ContinuationVal]


def copy_value(value: Value) -> Value:
    """Copy a value, narrowing any continuation inside it to `UNIT`."""
    if isinstance(value, ContinuationVal):
        return UNIT
    if isinstance(value, ArrayVal):
        return ArrayVal([copy_value(item) for item in value.items])
    if isinstance(value, MapVal):
        return MapVal([(copy_value(k), copy_value(v)) for k, v in value.pairs])
    if isinstance(value, FutureVal) and value.state == RESOLVED:
        return FutureVal.resolved(copy_value(value.value))
    # remaining variants are immutable
    return value


def type_name(value: Any) -> str:
    """Return the variant name of a runtime value."""
    if isinstance(value, NumVal):
        return 'Num'
    if isinstance(value, BoolVal):
        return 'Bool'
    if isinstance(value, StrVal):
        return 'Str'
    if isinstance(value, UnitVal):
        return 'Unit'
    if isinstance(value, ColorVal):
        return 'Color'
    if isinstance(value, ArrayVal):
        return 'Array'
    if isinstance(value, MapVal):
        return 'Map'
    if isinstance(value, FutureVal):
        return 'Future'
    if isinstance(value, ContinuationVal):
        return 'Continuation'
    return type(value).__name__


def format_number(n: float) -> str:
    if n == int(n) and abs(n) < 1e16:
        return str(int(n))
    return repr(n)


def to_string(value: Any) -> str:
    """Convert a value to user-facing text, as used by `print`.

    Strings print without quotes and whole numbers without a fractional
    part; containers and other variants fall back to their debug form
    for their elements.
    """
    if isinstance(value, NumVal):
        if value.value != value.value or value.value in (float('inf'), float('-inf')):
            return repr(value.value)
        return format_number(value.value)
    if isinstance(value, BoolVal):
        return 'true' if value.value else 'false'
    if isinstance(value, StrVal):
        return value.value
    if isinstance(value, UnitVal):
        return 'unit'
    if isinstance(value, ColorVal):
        c = value.color
        return f"color({c.r}, {c.g}, {c.b})"
    if isinstance(value, ArrayVal):
        return '[' + ', '.join(to_string(item) for item in value.items) + ']'
    if isinstance(value, MapVal):
        return '{' + ', '.join(f"{to_string(k)}: {to_string(v)}" for k, v in value.pairs) + '}'
    return repr(value)
