"""Error taxonomy and the JSON failure envelope.

Every error leaves the API as::

    {"success": false, "error": {"code": "...", "message": "..."}}

with a stable ``code`` string. Nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base error carrying an HTTP status and a stable error code."""

    status_code: int = 400
    code: str = "BAD_REQUEST"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code


class ConfigurationError(ApiError):
    """Missing external service credentials."""

    status_code = 500
    code = "CONFIGURATION_ERROR"


class AuthenticationError(ApiError):
    """Missing or rejected bearer token."""

    status_code = 401
    code = "INVALID_AUTHENTICATION"


class RequestValidationFailed(ApiError):
    """Required field missing or out of range."""

    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(ApiError):
    status_code = 400
    code = "NOT_FOUND"


class ConflictError(ApiError):
    """Resource exists but its state does not allow the operation."""

    status_code = 400
    code = "CONFLICT"


class UpstreamError(ApiError):
    """Non-2xx or transport failure from an external dependency."""

    status_code = 500
    code = "UPSTREAM_ERROR"

    def __init__(
        self,
        service: str,
        upstream_status: Optional[int] = None,
        body: str = "",
        *,
        status_code: Optional[int] = None,
    ) -> None:
        detail = f"{service} request failed"
        if upstream_status is not None:
            detail += f" with status {upstream_status}"
        if body:
            detail += f": {body[:500]}"
        super().__init__(detail, status_code=status_code)
        self.service = service
        self.upstream_status = upstream_status
        self.body = body


def error_envelope(code: str, message: str) -> Dict[str, Any]:
    return {"success": False, "error": {"code": code, "message": message}}


def success_envelope(data: Any, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    body.update(extra)
    body["data"] = data
    return body


def _validation_message(exc: RequestValidationError) -> str:
    """Describe the first offending field, e.g. ``Missing required field: bet_id``."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "header")]
    field = ".".join(loc) or "body"
    if first.get("type") == "missing":
        return f"Missing required field: {field}"
    return f"Invalid value for {field}: {first.get('msg', 'invalid')}"


def install_error_handlers(app: FastAPI) -> None:
    """Register handlers that render every failure as the JSON envelope."""

    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.info
        log("%s %s -> %s %s: %s", request.method, request.url.path, exc.status_code, exc.code, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(exc.code, exc.message),
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = _validation_message(exc)
        logger.info("%s %s -> 400 VALIDATION_ERROR: %s", request.method, request.url.path, message)
        return JSONResponse(
            status_code=400,
            content=error_envelope(RequestValidationFailed.code, message),
        )

    @app.exception_handler(SQLAlchemyError)
    async def _storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception("Storage failure on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_envelope("STORAGE_ERROR", f"Storage request failed: {exc.__class__.__name__}"),
        )
