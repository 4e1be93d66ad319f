"""
Guarded cells for state shared between the keystroke callback and readers.

Each mutable field of the engine lives in its own GuardedValue so that a
writer never waits on a lock held for another field. Values are treated
as immutable (floats, bools, ints, tuples); a reader therefore always
receives either the pre- or post-update value, never a partial one.

If the function applied inside a critical section raises, the cell keeps
its last consistent value and carries on. The keystroke callback must
survive anything: an exception escaping it would stop all keystroke
processing for the rest of the process.
"""
from threading import Lock
from typing import Callable, Generic, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GuardedValue(Generic[T]):
    """A single value behind its own lock, with a recovery path"""

    def __init__(self, value: T, name: str = "value"):
        self._value = value
        self._name = name
        self._lock = Lock()
        self._recoveries = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def recoveries(self) -> int:
        """How many critical sections failed and were recovered from"""
        return self._recoveries

    def get(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value

    def update(self, fn: Callable[[T], T]) -> T:
        """
        Replace the value with ``fn(old)`` and return the new value.

        On failure the previous value is retained and returned; the error
        is logged, never raised.
        """
        with self._lock:
            try:
                self._value = fn(self._value)
            except Exception as e:
                self._recoveries += 1
                logger.warning(
                    f"Recovered critical section '{self._name}' "
                    f"(keeping last value {self._value!r}): {e}"
                )
            return self._value

    def __repr__(self) -> str:
        return f"GuardedValue({self._name}={self.get()!r})"
