"""Custom exceptions and RFC 7807 Problem Detail error handlers."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

BASE_ERROR_URI = "https://holidays.bickers.co.uk/errors"


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all application exceptions → RFC 7807 JSON."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        super().__init__(detail)


class ValidationException(AppException):
    """422 — caller broke the engine's contract (missing or wrongly typed input)."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__(
            status_code=422,
            error_type="validation-error",
            title="Validation Error",
            detail="One or more fields failed validation.",
            errors=errors,
        )

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationException":
        return cls({field: [message]})


class BankHolidayFeedError(AppException):
    """503 — the GOV.UK bank holiday feed could not be read."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=503,
            error_type="bank-holidays-unavailable",
            title="Bank Holidays Unavailable",
            detail=detail,
        )


# ── RFC 7807 builder ────────────────────────────────────────────────

def _build_problem_detail(exc: AppException, request: Request) -> dict[str, Any]:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{exc.error_type}",
        "title": exc.title,
        "status": exc.status_code,
        "detail": exc.detail,
        "instance": str(request.url.path),
    }
    if exc.errors:
        body["errors"] = exc.errors
    return body


def _field_name(loc: tuple) -> str:
    # Drop the leading "body"/"query" segment FastAPI adds.
    if len(loc) > 1:
        return ".".join(str(p) for p in loc[1:])
    return str(loc[0]) if loc else "unknown"


# ── FastAPI handlers ────────────────────────────────────────────────

async def _handle_app_exception(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_build_problem_detail(exc, request),
        media_type="application/problem+json",
    )


async def _handle_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        name = _field_name(tuple(err.get("loc", ())))
        field_errors.setdefault(name, []).append(err.get("msg", "Invalid value"))

    problem = ValidationException(field_errors)
    problem.detail = "Request validation failed."
    return await _handle_app_exception(request, problem)


# ── Registration helper (called from main.py) ──────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""
    app.add_exception_handler(AppException, _handle_app_exception)          # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
