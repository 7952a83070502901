"""
Explicit success/failure values returned by store operations.

Store adapters never raise across their boundary; every write hands back
a Result that either carries the new identifier (or term) or a StoreError.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class StoreError:
    """Structured failure from the content store"""
    kind: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or a StoreError, never both"""
    value: Optional[T] = None
    error: Optional[StoreError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        if value is None or value == 0:
            # A write that hands back no identifier did not really succeed
            return cls(error=StoreError("empty_id", "Store returned no identifier"))
        return cls(value=value)

    @classmethod
    def failure(cls, kind: str, message: str) -> "Result[T]":
        return cls(error=StoreError(kind, message))

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> str:
        return self.error.message if self.error else ""
