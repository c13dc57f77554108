"""Error taxonomy shared by repositories, dependencies and endpoints.

Every error carries the HTTP status it maps to. The handlers registered by
``register_exception_handlers`` render them as ``{"detail": message}``;
store faults are logged with their cause and surfaced without internal detail.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class DashboardError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DashboardError):
    """Malformed input or a failed field rule."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(DashboardError):
    """Well-formed identifier with no matching record."""

    status_code = status.HTTP_404_NOT_FOUND


class UnauthorizedError(DashboardError):
    """Missing, invalid or expired token, or bad credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ConfigurationFault(DashboardError):
    """Server-side misconfiguration, e.g. no JWT signing secret."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class StoreFault(DashboardError):
    """Unexpected persistence failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def _format_location(loc: tuple) -> str:
    # Drop the leading "body"/"path" segment FastAPI adds
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


async def dashboard_error_handler(request: Request, exc: DashboardError) -> JSONResponse:
    headers = None
    if isinstance(exc, UnauthorizedError):
        headers = {"WWW-Authenticate": "Bearer"}

    if isinstance(exc, StoreFault):
        # Cause was logged where the fault was raised
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": "Internal server error"},
        )
    if isinstance(exc, ConfigurationFault):
        logger.error("configuration_fault", path=request.url.path, error=exc.message)

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body/path validation failures as 400 with field-level messages."""
    errors = []
    for err in exc.errors():
        message = str(err.get("msg", "Invalid value"))
        # pydantic prefixes custom ValueError messages
        message = message.removeprefix("Value error, ")
        errors.append({"field": _format_location(tuple(err.get("loc", ()))), "message": message})

    detail = errors[0]["message"] if errors else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": detail, "errors": errors},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error taxonomy handlers to the application."""
    app.add_exception_handler(DashboardError, dashboard_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
