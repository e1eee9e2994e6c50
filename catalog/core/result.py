"""Outcome type returned by the service and repository layers.

A ``Result`` is either ``Ok`` (payload plus status) or ``Err`` (message,
optional validation violations, status and error code). Expected failures
travel through this channel; exceptions are reserved for the unexpected.
Build results through the factory functions below, not the classes.
"""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic
from typing import TypeVar
from typing import Union

from catalog.core.error_codes import ErrorCode

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a payload."""

    data: T
    status_code: int = 200

    def __post_init__(self) -> None:
        if self.data is None:
            raise ValueError("Ok requires a payload")

    @property
    def is_success(self) -> bool:
        return True

    @property
    def error_message(self) -> None:
        return None

    @property
    def validation_errors(self) -> None:
        return None

    @property
    def error_code(self) -> None:
        return None

    def map(self, mapper: Callable[[T], U]) -> Ok[U]:
        """Apply ``mapper`` to the payload, keeping the status code."""
        return Ok(mapper(self.data), self.status_code)


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying an error message and status code."""

    error_message: str
    status_code: int = 400
    validation_errors: tuple[str, ...] | None = None
    error_code: str | None = None

    def __post_init__(self) -> None:
        if not self.error_message:
            raise ValueError("Err requires a non-empty error message")

    @property
    def is_success(self) -> bool:
        return False

    @property
    def data(self) -> None:
        return None

    def map(self, mapper: Callable[[object], object]) -> Err:
        """Failures propagate unchanged."""
        return self


Result = Union[Ok[T], Err]


def success(data: T, status_code: int = 200) -> Ok[T]:
    return Ok(data, status_code)


def created(data: T) -> Ok[T]:
    return Ok(data, 201)


def failure(message: str, status_code: int = 400, *, error_code: str | None = None) -> Err:
    return Err(message, status_code, None, error_code)


def validation_failure(errors: Sequence[str]) -> Err:
    """Wrap an ordered list of violations in a 400 outcome."""
    return Err("Validation failed", 400, tuple(errors), ErrorCode.VALIDATION_ERROR.value)


def not_found(message: str = "Resource not found", *, error_code: str = ErrorCode.NOT_FOUND.value) -> Err:
    return Err(message, 404, None, error_code)


def unauthorized(message: str = "Unauthorized") -> Err:
    return Err(message, 401, None, ErrorCode.UNAUTHORIZED.value)


def forbidden(message: str = "Forbidden") -> Err:
    return Err(message, 403, None, ErrorCode.FORBIDDEN.value)
