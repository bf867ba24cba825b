"""Result values returned by the registration coordinator"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Error variants surfaced to callers"""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STORE = "store"


@dataclass(frozen=True)
class CoordinatorError:
    """A typed failure, tagged with the saga step that produced it"""

    kind: ErrorKind
    message: str
    step: Optional[str] = None

    @classmethod
    def validation(cls, message: str, step: Optional[str] = None) -> "CoordinatorError":
        return cls(ErrorKind.VALIDATION, message, step)

    @classmethod
    def not_found(cls, message: str, step: Optional[str] = None) -> "CoordinatorError":
        return cls(ErrorKind.NOT_FOUND, message, step)

    @classmethod
    def store(cls, message: str, step: Optional[str] = None) -> "CoordinatorError":
        return cls(ErrorKind.STORE, message, step)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a coordinator operation.

    ``degraded`` is set when the operation reached its verdict but a
    compensation or best-effort step failed along the way. It never flips a
    failure into a success or the reverse.
    """

    value: Optional[T] = None
    error: Optional[CoordinatorError] = None
    degraded: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None, degraded: bool = False) -> "Result[T]":
        return cls(value=value, degraded=degraded)

    @classmethod
    def failure(
        cls,
        error: CoordinatorError,
        value: Optional[T] = None,
        degraded: bool = False,
    ) -> "Result[T]":
        return cls(value=value, error=error, degraded=degraded)
