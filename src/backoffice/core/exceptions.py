"""Domain errors and the exception handlers that render them with a request_id."""

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.backoffice.core.logging import get_logger

logger = get_logger(__name__)


class IdentityError(Exception):
    """Base class for identity, authorization and invitation failures.

    Services raise these; the HTTP layer maps ``status_code`` onto the response.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Request could not be processed"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidCredentials(IdentityError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid or expired code"


class InvalidToken(InvalidCredentials):
    default_detail = "Invalid or expired token"


class Forbidden(IdentityError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Insufficient permissions"


class NotFound(IdentityError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class Conflict(IdentityError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Already exists"


class InvalidState(IdentityError):
    """Transition requested from a state that does not allow it."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Operation not allowed in the current state"


class InvalidScope(IdentityError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Scope does not match the role"


class CodeDeliveryError(IdentityError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Failed to deliver the one-time code"


def _error_response(status_code: int, detail: object, headers: dict[str, str] | None = None):
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": detail,
            "request_id": correlation_id.get(),
        },
        headers=headers,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(IdentityError)
    async def identity_error_handler(request: Request, exc: IdentityError) -> JSONResponse:
        headers = None
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        return _error_response(exc.status_code, exc.detail, headers)

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _error_response(exc.status_code, exc.detail, getattr(exc, "headers", None))

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return _error_response(exc.status_code, exc.detail, exc.headers)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=correlation_id.get(),
            path=request.url.path,
        )
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
