"""
Custom exception handlers for FastAPI.

Response bodies are either ``{"msg": ...}`` or ``{"errors": [...]}``.

Security:
- Request IDs are logged server-side for tracing but NOT exposed to clients
- Generic error messages for 500 errors to prevent information disclosure
"""

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from devconnector.errors import (
    NotFound,
    RemoteNotFound,
    RemoteUnavailable,
    StorageFault,
    ValidationError,
)
from devconnector.logging import get_logger

logger = get_logger("backend.errors")


def _get_request_id() -> str:
    """
    Get the current request ID from context.

    Used for server-side logging only - NOT exposed to clients.
    """
    return structlog.contextvars.get_contextvars().get("request_id", "-")


def _msg(status_code: int, msg: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"msg": msg}, headers=headers)


def _request_errors(exc: RequestValidationError) -> list[dict]:
    """Flatten pydantic errors into ``{"msg", "param"}`` entries."""
    errors = []
    for error in exc.errors():
        # loc is ("body", "field", ...) for body fields
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.append({"msg": error.get("msg", "Invalid value"), "param": ".".join(loc)})
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        logger.warning(
            "http_exception",
            detail=exc.detail,
            status_code=exc.status_code,
            request_id=_get_request_id(),
        )
        return _msg(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = _request_errors(exc)
        logger.warning("validation_error", errors=errors, request_id=_get_request_id())
        return JSONResponse(status_code=400, content={"errors": errors})

    @app.exception_handler(ValidationError)
    async def domain_validation_handler(request: Request, exc: ValidationError):
        logger.warning("validation_error", errors=exc.errors, request_id=_get_request_id())
        return JSONResponse(status_code=400, content={"errors": exc.errors})

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        return _msg(404, exc.msg)

    @app.exception_handler(RemoteNotFound)
    async def remote_not_found_handler(request: Request, exc: RemoteNotFound):
        return _msg(404, exc.msg)

    @app.exception_handler(RemoteUnavailable)
    async def remote_unavailable_handler(request: Request, exc: RemoteUnavailable):
        logger.warning("remote_unavailable", request_id=_get_request_id())
        return _msg(502, exc.msg)

    @app.exception_handler(StorageFault)
    async def storage_fault_handler(request: Request, exc: StorageFault):
        # Details were logged where the fault was raised
        logger.error("storage_fault", request_id=_get_request_id())
        return _msg(500, "Server error")

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            request_id=_get_request_id(),
        )
        return _msg(500, "Server error")
