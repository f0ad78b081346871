from typing import Dict, List

from .errors import ErrorVal, TrilangError
from .types import Value, copy_value


class Environment:
    """Maps variable names to values for one session.

    The environment belongs to the front end and is passed to every
    `Runtime.evaluate` call. Values are copied on the way in and out, so a
    continuation stored in a variable reads back as Unit.
    """
    def __init__(self):
        self.values: Dict[str, Value] = {}

    def get(self, name: str) -> Value:
        if name not in self.values:
            raise TrilangError(ErrorVal('NameError', f'undefined variable {name}'))
        return copy_value(self.values[name])

    def set(self, name: str, value: Value):
        self.values[name] = copy_value(value)

    def names(self) -> List[str]:
        return list(self.values.keys())

    def __contains__(self, name: str) -> bool:
        return name in self.values
