# result type returned by controller operations
# failures are values here; BackendError never escapes a controller

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from crm_console.errors import ConsoleError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[ConsoleError] = None
    cancelled: bool = False

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ConsoleError) -> "Result[T]":
        return cls(ok=False, error=error)

    @classmethod
    def aborted(cls) -> "Result[T]":
        """nothing was applied: a confirmation prompt was declined before sending,
        or the controller was closed before the response came back
        """
        return cls(ok=False, cancelled=True)
