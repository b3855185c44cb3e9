"""
Result type for command handlers

Expected business outcomes (overlap, invalid transition, wrong amount)
are returned as values instead of being raised. Views unwrap the result
at the HTTP boundary.
"""

from dataclasses import dataclass
from functools import wraps
from typing import Callable, Generic, Optional, TypeVar

from shared.domain.errors import DomainError

T = TypeVar('T')


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[DomainError] = None

    @classmethod
    def ok(cls, value: T = None) -> 'Result[T]':
        return cls(value=value)

    @classmethod
    def fail(cls, error: DomainError) -> 'Result[T]':
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise the carried error"""
        if self.error is not None:
            raise self.error
        return self.value


def as_result(func: Callable[..., T]) -> Callable[..., 'Result[T]']:
    """
    Turn a handler body into a Result-returning operation

    Inside the body a DomainError aborts the unit of work (the exception
    unwinds the transaction), the decorator converts it into a failed
    Result at the boundary. Any other exception is an unexpected fault
    and propagates unchanged.
    """
    @wraps(func)
    def wrapper(*args, **kwargs) -> 'Result[T]':
        try:
            return Result.ok(func(*args, **kwargs))
        except DomainError as error:
            return Result.fail(error)
    return wrapper
