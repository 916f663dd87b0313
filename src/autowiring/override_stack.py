"""Stack of per-call parameter overrides.

Every ``make`` or ``call`` pushes the overrides its caller supplied and pops them
when it returns, so while a dependency is being constructed recursively only its
own (usually empty) frame is visible, never an ancestor's.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional

__all__ = ["OverrideStack"]


class OverrideStack:
    """Last-in-first-out stack of parameter-name to value mappings."""

    def __init__(self):
        self._frames: list[Mapping[str, Any]] = []

    @contextmanager
    def frame(self, overrides: Optional[Mapping[str, Any]] = None) -> Iterator[Mapping[str, Any]]:
        """Push a frame for the duration of a ``with`` block.

        The frame is popped when the block exits, whether or not it raised.

        Example:
            >>> stack = OverrideStack()
            >>> with stack.frame({"number": 10}):
            ...     stack.current["number"]
            10
        """
        frame = dict(overrides or {})
        self._frames.append(frame)
        try:
            yield frame
        finally:
            self._frames.pop()

    @property
    def current(self) -> Mapping[str, Any]:
        """The topmost frame, or an empty mapping if nothing is being resolved."""
        return self._frames[-1] if self._frames else {}

    def __len__(self) -> int:
        return len(self._frames)
