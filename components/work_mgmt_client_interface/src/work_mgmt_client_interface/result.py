"""Explicit success/failure values returned by tracker operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of one tracker operation.

    Clients never raise for tracker-side problems; they hand back an Outcome
    carrying either a value or a message explaining the failure.
    """

    ok: bool
    value: T | None = None
    message: str | None = None

    @classmethod
    def success(cls, value: T | None = None, message: str | None = None) -> Outcome[T]:
        return cls(True, value, message)

    @classmethod
    def failure(cls, message: str) -> Outcome[T]:
        return cls(False, None, message)

    def __bool__(self) -> bool:
        return self.ok
