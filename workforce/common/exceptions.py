"""Domain errors rendered as RFC 7807 ``application/problem+json`` bodies."""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

BASE_ERROR_URI = "https://workforce.app/errors"
PROBLEM_JSON = "application/problem+json"

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base error; subclasses fix ``status_code``, ``error_type`` and ``title``."""

    status_code: ClassVar[int] = 500
    error_type: ClassVar[str] = "internal-error"
    title: str = "Internal Server Error"

    def __init__(self, detail: str, errors: Optional[dict[str, Any]] = None) -> None:
        self.detail = detail
        self.errors = errors
        super().__init__(detail)

    def to_problem(self, instance: str) -> dict[str, Any]:
        body: dict[str, Any] = {
            "type": f"{BASE_ERROR_URI}/{self.error_type}",
            "title": self.title,
            "status": self.status_code,
            "detail": self.detail,
            "instance": instance,
        }
        if self.errors:
            body["errors"] = self.errors
        return body


class NotFoundException(AppException):
    status_code = 404
    error_type = "not-found"

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        self.title = f"{entity_type} Not Found"
        super().__init__(f"{entity_type} with id '{entity_id}' does not exist.")


class ConflictError(AppException):
    """Duplicate of a unique value (mobile, e-mail, owner account)."""

    status_code = 409
    error_type = "conflict"
    title = "Conflict"

    def __init__(self, field: str, value: Any) -> None:
        super().__init__(
            f"An entry with {field}='{value}' already exists.",
            errors={field: [f"'{value}' is already in use."]},
        )


class ForbiddenException(AppException):
    status_code = 403
    error_type = "forbidden"
    title = "Forbidden"

    def __init__(
        self,
        detail: str = "You do not have permission to perform this action.",
    ) -> None:
        super().__init__(detail)


class ValidationException(AppException):
    """Business-rule failures keyed by field name."""

    status_code = 422
    error_type = "validation-error"
    title = "Validation Error"

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__("One or more fields failed validation.", errors=errors)


class SubscriptionExpiredException(AppException):
    status_code = 402
    error_type = "subscription-expired"
    title = "Subscription Expired"

    def __init__(self, company_id: Any) -> None:
        super().__init__(
            f"The subscription for company '{company_id}' has expired. Renew to continue.",
        )


# ── Handlers ────────────────────────────────────────────────────────

async def _handle_app_exception(request: Request, exc: AppException) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(level, "%s %s → %d %s", request.method, request.url.path, exc.status_code, exc.error_type)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_problem(request.url.path),
        media_type=PROBLEM_JSON,
    )


def _field_name(loc: tuple) -> str:
    # ("body", "mobile") → "mobile"; ("query", "month") → "month"
    if len(loc) > 1:
        return ".".join(str(part) for part in loc[1:])
    return str(loc[0]) if loc else "unknown"


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        errors.setdefault(_field_name(tuple(err.get("loc", ()))), []).append(
            err.get("msg", "Invalid value"),
        )
    return JSONResponse(
        status_code=422,
        content={
            "type": f"{BASE_ERROR_URI}/{ValidationException.error_type}",
            "title": ValidationException.title,
            "status": 422,
            "detail": "Request validation failed.",
            "instance": request.url.path,
            "errors": errors,
        },
        media_type=PROBLEM_JSON,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the problem+json handlers on *app*."""
    app.add_exception_handler(AppException, _handle_app_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
