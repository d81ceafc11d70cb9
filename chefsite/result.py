"""Result envelope for read operations.

Repository reads return ``Ok(value)`` or ``Err(error)`` instead of raising, so
the caller decides what to show when the store is unreachable::

    events = crud_events.get_all(db).unwrap_or(fixtures.EVENTS)
"""

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_or_else(self, f: Callable[[Exception], T]) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> "Result[U]":
        return Ok(f(self.value))


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed result carrying the exception that caused it."""

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the carried error."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_or_else(self, f: Callable[[Exception], T]) -> T:
        return f(self.error)

    def map(self, f: Callable[[T], U]) -> "Result[U]":
        return Err(self.error)


Result = Union[Ok[T], Err[T]]
