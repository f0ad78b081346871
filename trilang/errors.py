from dataclasses import dataclass


@dataclass
class ErrorVal:
    """Describes a Trilang failure.

    `name` is the error category (TypeError, ArithmeticError, IndexError,
    KeyError, NameError, FutureError, StackError or SyntaxError) and
    `message` is the human-readable text shown to the user.
    """
    name: str
    message: str

    def __repr__(self) -> str:
        return f"Error(name={self.name!r}, message={self.message!r})"


class TrilangError(Exception):
    """Exception type used to propagate Trilang evaluation errors."""
    def __init__(self, err: ErrorVal):
        super().__init__(f"{err.name}: {err.message}")
        self.err = err

    @property
    def message(self) -> str:
        return self.err.message


def type_error(message: str) -> TrilangError:
    return TrilangError(ErrorVal('TypeError', message))
