import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from ticketing.exceptions import AppError, AuthenticationError, RequestBodyError

logger = structlog.get_logger()


def status_code_for(code: str) -> int:
    """Translate a domain error code into an HTTP status.

    Rules are checked in order and the first match wins. Unknown codes fall
    back to 400.
    """
    if code == "VALIDATION_ERROR":
        return 400
    if code.startswith("INVALID_"):
        return 400
    if code in ("AUTHORIZATION_ERROR", "UNAUTHORIZED"):
        return 403
    if code == "NOT_FOUND" or code.endswith("_NOT_FOUND"):
        return 404
    if code == "CONFLICT" or code.startswith("DUPLICATE_"):
        return 409
    if code.startswith("ALREADY_"):
        return 409
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    status_code = status_code_for(exc.code)
    logger.info(
        "request_rejected",
        path=request.url.path,
        code=exc.code,
        status_code=status_code,
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.message, "code": exc.code},
    )


async def authentication_error_handler(
    request: Request, exc: AuthenticationError
) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"error": exc.message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def request_body_error_handler(request: Request, exc: RequestBodyError) -> JSONResponse:
    content: dict = {"error": exc.message}
    if exc.missing_fields:
        content["missingFields"] = exc.missing_fields
    elif exc.field_errors:
        content["code"] = "VALIDATION_ERROR"
        content["fieldErrors"] = exc.field_errors
    return JSONResponse(status_code=400, content=content)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    field_errors = [
        {
            "field": ".".join(str(part) for part in error["loc"][1:]) or str(error["loc"][0]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation failed",
            "code": "VALIDATION_ERROR",
            "fieldErrors": field_errors,
        },
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unexpected_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected error occurred",
            "message": str(exc) or "Unknown error",
        },
    )


class UnexpectedErrorMiddleware(BaseHTTPMiddleware):
    """Turns unhandled exceptions into the JSON 500 response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return await unexpected_error_handler(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthenticationError, authentication_error_handler)
    app.add_exception_handler(RequestBodyError, request_body_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
