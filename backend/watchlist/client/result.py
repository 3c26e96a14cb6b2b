from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a remote call: *data* on success, a user-facing *error* otherwise."""

    data: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: T | None = None) -> "Result[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, error: str) -> "Result[T]":
        return cls(error=error)
