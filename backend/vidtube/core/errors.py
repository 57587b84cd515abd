# vidtube/core/errors.py
"""
Domain errors and their conversion to the uniform error envelope.

Every error response has the shape:
    {"statusCode": int, "success": false, "message": str, "errors": [...], "data": null}
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("uvicorn.error")


class ApiError(Exception):
    """Base class for errors that abort a request with a client-visible envelope."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None, errors: list | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        self.errors = list(errors or [])
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class BadRequestError(ApiError):
    """Malformed identifier, missing required field, empty trimmed content."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class AuthenticationError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized request"


class ForbiddenError(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class UpstreamError(ApiError):
    """Asset-store failure, empty post-write fetch, or other internal failure."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


def error_envelope(status_code: int, message: str, errors: list | None = None) -> dict:
    return {
        "statusCode": status_code,
        "success": False,
        "message": message,
        "errors": list(errors or []),
        "data": None,
    }


async def _api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.status_code, exc.message, exc.errors),
    )


async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.status_code, message),
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope(status.HTTP_400_BAD_REQUEST, "Invalid request", errors),
    )


async def _unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("[error] unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Convert every error raised while handling a request into the error envelope."""
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
