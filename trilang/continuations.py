from typing import List, Optional

from .types import ContinuationVal


class ContinuationStack:
    """Last-in, first-out stack of suspended computations.

    Owned by a single `Runtime`; never shared between runtimes.
    """
    def __init__(self):
        self.stack: List[ContinuationVal] = []

    def push(self, cont: ContinuationVal):
        self.stack.append(cont)

    def pop(self) -> Optional[ContinuationVal]:
        if not self.stack:
            return None
        return self.stack.pop()

    def clear(self):
        self.stack.clear()

    def is_empty(self) -> bool:
        return not self.stack

    def __len__(self) -> int:
        return len(self.stack)
