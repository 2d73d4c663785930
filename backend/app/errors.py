"""Domain errors and the handlers that render them as API envelopes.

Services raise these; they never build HTTP responses themselves. Each error
carries the status code it maps to and a user-safe message.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base domain error with HTTP status and user-safe message."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN


class UnauthenticatedError(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ConflictError(DomainError):
    """Duplicate rows, self-protection and temporal guards."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidInputError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST


class DependencyUnavailableError(DomainError):
    """The access-log store cannot be reached."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def _error_body(message: str, errors: list | None = None) -> dict:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


def register_error_handlers(app: FastAPI) -> None:
    """Render every failure as ``{"success": false, "message": ...}``."""

    @app.exception_handler(DomainError)
    async def domain_error(request: Request, exc: DomainError):
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body("Invalid data", errors),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return JSONResponse(status_code=exc.status_code, content=_error_body(message))

    @app.exception_handler(Exception)
    async def server_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("Internal server error"),
        )
