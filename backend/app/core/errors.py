"""Domain error taxonomy and the FastAPI handlers that render it.

Core operations either return their value or raise one ``AppError`` subclass.
The HTTP boundary converts each kind to a status code and the standard error
envelope exactly once, in the handlers installed by ``install_error_handlers``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.logging import get_logger
from app.core.responses import error_response

if TYPE_CHECKING:
    from fastapi import FastAPI, Request
    from fastapi.responses import JSONResponse

logger = get_logger(__name__)

_STATUS_CODES: dict[int, str] = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    500: "INTERNAL_ERROR",
}


def code_for_status(status_code: int) -> str:
    return _STATUS_CODES.get(status_code, "UNKNOWN_ERROR")


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: Any = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.code = code or code_for_status(self.status_code)
        self.details = details


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, errors: list[dict[str, str]] | None = None) -> None:
        super().__init__(message, details={"errors": errors} if errors else None)
        self.errors = errors or []


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: object, *, message: str | None = None) -> None:
        super().__init__(message or f"{entity} with ID '{entity_id}' not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT


class BusinessRuleError(AppError):
    """A domain rule rejected the operation; ``code`` names the rule."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str, code: str, *, status_code: int | None = None) -> None:
        super().__init__(message, code=code, status_code=status_code)


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    errors: list[dict[str, str]] = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or "body", "message": str(err.get("msg", "invalid"))})
    return errors


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request.failed path=%s code=%s message=%s", request.url.path, exc.code, exc.message)
    else:
        logger.info("request.rejected path=%s status=%s code=%s", request.url.path, exc.status_code, exc.code)
    return error_response(exc.message, exc.status_code, code=exc.code, details=exc.details)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = _field_errors(exc)
    logger.info("request.invalid path=%s errors=%d", request.url.path, len(errors))
    return error_response(
        "Validation failed",
        status.HTTP_400_BAD_REQUEST,
        code=code_for_status(status.HTTP_400_BAD_REQUEST),
        details={"errors": errors},
    )


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        message = f"Method {request.method} not allowed"
    return error_response(message, exc.status_code, code=code_for_status(exc.status_code))


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request.error path=%s method=%s", request.url.path, request.method)
    return error_response(
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=code_for_status(status.HTTP_500_INTERNAL_SERVER_ERROR),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
