from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ticketing.exceptions import AppError, CommandFailedError

T = TypeVar("T")


@dataclass(frozen=True)
class CommandError:
    code: str
    message: str
    details: dict[str, Any] | None = None

    @classmethod
    def from_exception(cls, exc: AppError) -> "CommandError":
        return cls(code=exc.code, message=exc.message, details=exc.details)


@dataclass(frozen=True)
class CommandResult(Generic[T]):
    success: bool
    data: T | None = None
    error: CommandError | None = None

    def __post_init__(self) -> None:
        if self.success and self.error is not None:
            raise ValueError("A successful command result cannot carry an error")
        if not self.success and self.error is None:
            raise ValueError("A failed command result must carry an error")
        if not self.success and self.data is not None:
            raise ValueError("A failed command result cannot carry data")

    @classmethod
    def ok(cls, data: T) -> "CommandResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: CommandError) -> "CommandResult[T]":
        return cls(success=False, error=error)

    def unwrap(self) -> T:
        if self.error is not None:
            raise CommandFailedError(
                self.error.message, code=self.error.code, details=self.error.details
            )
        return self.data  # type: ignore[return-value]
