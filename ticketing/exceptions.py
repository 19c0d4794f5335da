from typing import Any


class AppError(Exception):
    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details
        super().__init__(message)


class ValidationError(AppError):
    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class AuthorizationError(AppError):
    def __init__(self, message: str = "Unauthorized access"):
        super().__init__(message, code="UNAUTHORIZED")


class NotFoundError(AppError):
    def __init__(self, resource: str, resource_id: str | None = None):
        code = f"{resource.upper().replace(' ', '')}_NOT_FOUND"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(message, code=code)


class BusinessRuleError(AppError):
    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, code=code, details=details)


class DatabaseError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="DATABASE_ERROR")


class CommandFailedError(AppError):
    """Raised when a failed command result is unwrapped."""


class AuthenticationError(Exception):
    def __init__(self, message: str = "Authentication required"):
        self.message = message
        super().__init__(message)


class RequestBodyError(Exception):
    """Request body could not be turned into a valid command input."""

    def __init__(
        self,
        message: str,
        missing_fields: list[str] | None = None,
        field_errors: list[dict[str, str]] | None = None,
    ):
        self.message = message
        self.missing_fields = missing_fields or []
        self.field_errors = field_errors or []
        super().__init__(message)
