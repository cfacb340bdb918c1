"""
Exception handlers for the application.

Every failure leaves the service in the standard failure envelope.
"""
import logging
import traceback
from typing import Any, Dict, List

from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskorbit.adapters.http_framework import HTTPFrameworkAdapter
from taskorbit.api.response_strategy import response_context
from taskorbit.exceptions import ServiceError, ValidationError
from taskorbit.monitoring import get_request_id

# Initialize adapter
http_adapter = HTTPFrameworkAdapter()
Request = http_adapter.Request
JSONResponse = http_adapter.JSONResponse

logger = logging.getLogger(__name__)

# Location prefixes that say where a value came from rather than which field it is
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def _is_production(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings and settings.is_production)


def _field_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        value = error.get("input")
        errors.append({
            "field": ".".join(loc) or "body",
            "message": message,
            "value": value if isinstance(value, (str, int, float, bool)) or value is None else str(value),
        })
    return errors


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle request validation errors with per-field messages.
    """
    errors = _field_errors(exc)
    logger.warning(
        f"Validation error in {request.method} {request.url.path}: "
        + ", ".join(f"{e['field']}: {e['message']}" for e in errors)
    )
    return response_context.render_error("Validation failed", 400, errors=errors)


async def service_exception_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """
    Handler for errors raised by the service layer.
    Internal errors hide their message; client errors pass it through.
    """
    exc.request_id = exc.request_id or get_request_id() or None
    status_code = exc.status_code

    if status_code >= 500:
        logger.error(
            f"Service error in {request.method} {request.url.path}: {exc.to_dict()}",
            exc_info=exc.original_error or exc,
        )
        stack = None if _is_production(request) else "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
        return response_context.render_error(exc.message, status_code, stack=stack)

    logger.info(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}")
    errors = exc.errors if isinstance(exc, ValidationError) else None
    if isinstance(exc, ValidationError) and not errors and exc.field:
        errors = [{"field": exc.field, "message": exc.message, "value": exc.value}]
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return response_context.render_error(exc.message, status_code, errors=errors, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Handler for HTTPException, including routing 404/405.
    """
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("message") or detail.get("error") or "Request failed"
    else:
        message = str(detail) if detail else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = "Route not found"
    return response_context.render_error(message, exc.status_code, headers=getattr(exc, "headers", None))


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled exceptions.
    """
    logger.error(
        f"Unhandled exception in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
    )
    stack = None if _is_production(request) else "".join(
        traceback.format_exception(type(exc), exc, exc.__traceback__)
    )
    return response_context.render_error("Internal server error", 500, stack=stack)


def setup_exception_handlers(app):
    """
    Register exception handlers with the FastAPI app.
    """
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(ServiceError, service_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
