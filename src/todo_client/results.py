from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from .errors import TaskClientError

T = TypeVar("T")


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a TaskBoard operation: either a value or the error that stopped it.
    """

    value: Optional[T] = None
    error: Optional[TaskClientError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: TaskClientError) -> "Result[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value, raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
