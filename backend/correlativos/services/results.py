"""Tagged outcomes returned by the correlative services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class CorrelativeErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    INVALID_CONFIGURATION = "invalid_configuration"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    TRANSIENT_STORAGE = "transient_storage"


@dataclass(slots=True)
class Result(Generic[T]):
    """Either a value or one error kind with a user-facing message.

    Services return these instead of raising so every caller has to decide
    what each failure kind means for it.
    """

    value: T | None = None
    error: CorrelativeErrorKind | None = None
    message: str | None = None
    replayed: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T, *, replayed: bool = False) -> "Result[T]":
        return cls(value=value, replayed=replayed)

    @classmethod
    def failure(cls, error: CorrelativeErrorKind, message: str) -> "Result[T]":
        return cls(error=error, message=message)
