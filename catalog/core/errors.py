"""Typed error taxonomy and the boundary translator that renders it."""

from __future__ import annotations

import logging
import traceback
from collections.abc import Mapping
from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING
from typing import Any
from typing import ClassVar

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp
from starlette.types import Message
from starlette.types import Receive
from starlette.types import Scope
from starlette.types import Send

from catalog.core.error_codes import ErrorCode
from catalog.schemas.error import ErrorResponse

if TYPE_CHECKING:
    from catalog.core.result import Err

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR_MESSAGE = "An internal server error occurred"
OUTCOME_VALIDATION_FIELD = "request"


class ErrorKind(str, Enum):
    """Closed set of typed error tags understood by the translator."""

    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"
    BUSINESS_RULE_VIOLATED = "business_rule_violated"
    STORAGE_FAILURE = "storage_failure"
    REQUEST_FAILED = "request_failed"


def _code_value(code: ErrorCode | str) -> str:
    return code.value if isinstance(code, ErrorCode) else str(code)


def http_error_code(status_code: int) -> str:
    """Derive a stable error code from an HTTP status."""
    if status_code == status.HTTP_404_NOT_FOUND:
        return ErrorCode.NOT_FOUND.value
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return ErrorCode.UNAUTHORIZED.value
    if status_code == status.HTTP_403_FORBIDDEN:
        return ErrorCode.FORBIDDEN.value
    if status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return ErrorCode.METHOD_NOT_ALLOWED.value
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return ErrorCode.INTERNAL_SERVER_ERROR.value
    return ErrorCode.BAD_REQUEST.value


class CatalogError(Exception):
    """Base typed error. ``kind`` selects the translator arm."""

    kind: ClassVar[ErrorKind] = ErrorKind.REQUEST_FAILED

    def __init__(
        self,
        message: str,
        *,
        error_code: ErrorCode | str,
        status_code: int,
        validation_errors: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = _code_value(error_code)
        self.status_code = status_code
        self.validation_errors = (
            {field: list(messages) for field, messages in validation_errors.items()}
            if validation_errors
            else None
        )


class NotFoundError(CatalogError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str, *, error_code: ErrorCode | str = ErrorCode.PRODUCT_NOT_FOUND) -> None:
        super().__init__(message, error_code=error_code, status_code=status.HTTP_404_NOT_FOUND)

    @classmethod
    def for_entity(cls, entity_name: str, entity_id: object) -> NotFoundError:
        return cls(f"{entity_name} with ID {entity_id} was not found.")


class ValidationFailedError(CatalogError):
    kind = ErrorKind.VALIDATION_FAILED

    def __init__(self, errors: Mapping[str, Sequence[str]]) -> None:
        super().__init__(
            "One or more validation errors occurred.",
            error_code=ErrorCode.VALIDATION_ERROR,
            status_code=status.HTTP_400_BAD_REQUEST,
            validation_errors=errors,
        )


class BusinessRuleError(CatalogError):
    kind = ErrorKind.BUSINESS_RULE_VIOLATED

    def __init__(self, message: str, error_code: ErrorCode | str) -> None:
        super().__init__(message, error_code=error_code, status_code=status.HTTP_400_BAD_REQUEST)


class StorageError(CatalogError):
    """Storage fault. The cause is chained, never echoed in the message."""

    kind = ErrorKind.STORAGE_FAILURE

    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__(
            "A database error occurred.",
            error_code=ErrorCode.DATABASE_ERROR,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
        self.__cause__ = cause


class RequestFailedError(CatalogError):
    kind = ErrorKind.REQUEST_FAILED

    def __init__(self, status_code: int, message: str = "Request failed") -> None:
        super().__init__(message, error_code=http_error_code(status_code), status_code=status_code)


class ErrorTranslator:
    """Single place where failures become ``ErrorResponse`` payloads."""

    def __init__(self, *, is_production: bool) -> None:
        self.is_production = is_production

    def translate(self, exc: BaseException) -> ErrorResponse:
        details = self._details(exc)
        kind = exc.kind if isinstance(exc, CatalogError) else None

        match kind:
            case ErrorKind.VALIDATION_FAILED:
                return ErrorResponse(
                    status_code=exc.status_code,
                    message=exc.message,
                    error_code=exc.error_code,
                    validation_errors=exc.validation_errors,
                    details=details,
                )
            case ErrorKind.NOT_FOUND if exc.error_code == ErrorCode.PRODUCT_NOT_FOUND.value:
                return self._typed(exc, details)
            case ErrorKind.BUSINESS_RULE_VIOLATED:
                return self._typed(exc, details)
            case ErrorKind.NOT_FOUND | ErrorKind.STORAGE_FAILURE | ErrorKind.REQUEST_FAILED:
                return self._typed(exc, details)
            case _:
                return ErrorResponse(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    message=GENERIC_SERVER_ERROR_MESSAGE if self.is_production else str(exc),
                    error_code=ErrorCode.INTERNAL_SERVER_ERROR.value,
                    details=details,
                )

    def from_outcome(self, outcome: Err) -> ErrorResponse:
        """Render a failed outcome in the same wire shape."""
        validation_errors = None
        if outcome.validation_errors:
            validation_errors = {OUTCOME_VALIDATION_FIELD: list(outcome.validation_errors)}
        return ErrorResponse(
            status_code=outcome.status_code,
            message=outcome.error_message,
            error_code=outcome.error_code or http_error_code(outcome.status_code),
            validation_errors=validation_errors,
        )

    def render(self, payload: ErrorResponse) -> JSONResponse:
        return JSONResponse(status_code=payload.status_code, content=payload.to_wire())

    def _typed(self, exc: CatalogError, details: str | None) -> ErrorResponse:
        return ErrorResponse(
            status_code=exc.status_code,
            message=exc.message,
            error_code=exc.error_code,
            details=details,
        )

    def _details(self, exc: BaseException) -> str | None:
        if self.is_production:
            return None
        return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


class ErrorTranslationMiddleware:
    """Catch anything escaping the app and answer with an ``ErrorResponse``."""

    def __init__(self, app: ASGIApp, *, translator: ErrorTranslator) -> None:
        self.app = app
        self.translator = translator

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            logger.exception("An unhandled exception occurred: %s", exc)
            if response_started:
                return
            response = self.translator.render(self.translator.translate(exc))
            await response(scope, receive, send)


def _format_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    if not isinstance(location, (tuple, list)):
        return str(location)

    prefixes = {"body", "query", "path", "header", "cookie"}
    filtered = [str(part) for part in location if part not in prefixes]
    if filtered:
        return ".".join(filtered)

    if not location:
        return OUTCOME_VALIDATION_FIELD

    return str(location[0])


def _validation_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for issue in exc.errors():
        field = _format_location(issue.get("loc", ()))
        errors.setdefault(field, []).append(str(issue.get("msg", "Invalid value")))
    return errors


def _translator(request: Request) -> ErrorTranslator:
    return request.app.state.error_translator


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed requests with the shared validation payload."""
    errors = _validation_errors(exc)
    logger.warning(
        "Request validation failed",
        extra={"path": request.url.path, "method": request.method, "fields": sorted(errors)},
    )
    error = ValidationFailedError(errors)
    error.__cause__ = exc
    translator = _translator(request)
    return translator.render(translator.translate(error))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap routing and HTTP errors in the shared payload."""
    message = str(exc.detail) if isinstance(exc.detail, str) and exc.detail else "Request failed"
    error = RequestFailedError(exc.status_code, message)
    error.__cause__ = exc
    translator = _translator(request)
    return translator.render(translator.translate(error))


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Render typed errors raised by route handlers."""
    logger.info(
        "Typed error %s raised",
        exc.error_code,
        extra={"path": request.url.path, "method": request.method, "status_code": exc.status_code},
    )
    translator = _translator(request)
    return translator.render(translator.translate(exc))


def register_error_handlers(app: FastAPI, translator: ErrorTranslator) -> None:
    """Attach the translator's handlers and catch-all middleware to an app."""
    app.state.error_translator = translator
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_middleware(ErrorTranslationMiddleware, translator=translator)
