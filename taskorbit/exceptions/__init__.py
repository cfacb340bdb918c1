"""
Standard exceptions for TaskOrbit services.

Services raise these instead of HTTP errors; the API layer converts them with
to_http_exception() or the registered exception handlers.
"""
from typing import Any, Dict, List, Optional

from fastapi import HTTPException


class ServiceError(Exception):
    """Base class for all service-layer errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.request_id = request_id
        self.context = dict(context) if context else {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for logging and responses."""
        result: Dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
        }
        if self.request_id:
            result["request_id"] = self.request_id
        if self.context:
            result["context"] = self.context
        if self.original_error is not None:
            result["original_error"] = {
                "type": type(self.original_error).__name__,
                "message": str(self.original_error),
            }
        return result


class ValidationError(ServiceError):
    """Input failed validation before reaching storage."""

    status_code = 400

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.errors = errors or []
        if field is not None:
            self.context["field"] = field
        if value is not None:
            self.context["value"] = str(value)


class AuthenticationError(ServiceError):
    """Credentials or bearer token were rejected."""

    status_code = 401


class PermissionDeniedError(ServiceError):
    """Caller is authenticated but may not perform the operation."""

    status_code = 403


class NotFoundError(ServiceError):
    """Referenced record does not exist."""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Any, message: Optional[str] = None, **kwargs: Any):
        resource_id = str(resource_id)
        super().__init__(message or f"{resource_type} with ID '{resource_id}' not found", **kwargs)
        self.resource_type = resource_type
        self.resource_id = resource_id
        self.context["resource_type"] = resource_type
        self.context["resource_id"] = resource_id


class TaskNotFoundError(NotFoundError):
    def __init__(self, task_id: str, **kwargs: Any):
        super().__init__("Task", task_id, message="Task not found", **kwargs)
        self.task_id = task_id


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str, **kwargs: Any):
        super().__init__("User", user_id, message="User not found", **kwargs)
        self.user_id = user_id


class DuplicateError(ServiceError):
    """A unique field already holds the given value."""

    status_code = 409

    def __init__(self, resource_type: str, field: str, value: Any, message: Optional[str] = None, **kwargs: Any):
        super().__init__(message or f"{resource_type} with {field} '{value}' already exists", **kwargs)
        self.resource_type = resource_type
        self.field = field
        self.value = value
        self.context.update({"resource_type": resource_type, "field": field, "value": str(value)})


class InternalError(ServiceError):
    """Unexpected failure; clients only see a generic message."""

    status_code = 500


class DatabaseError(InternalError):
    """A storage call failed."""

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.operation = operation
        if operation is not None:
            self.context["operation"] = operation


def to_http_exception(
    exc: ServiceError,
    include_context: bool = True,
    default_status_code: Optional[int] = None,
) -> HTTPException:
    """
    Convert a ServiceError into a FastAPI HTTPException.

    Args:
        exc: Service error to convert
        include_context: Whether to copy the error context into the detail
        default_status_code: Status for ServiceError subclasses that do not declare one

    Returns:
        HTTPException with a dict detail containing at least "error" and "message"
    """
    status_code = exc.status_code
    if type(exc).status_code == ServiceError.status_code and not isinstance(exc, InternalError):
        status_code = default_status_code or status_code

    detail: Dict[str, Any] = {"error": type(exc).__name__, "message": exc.message}
    if exc.request_id:
        detail["request_id"] = exc.request_id
    if include_context and exc.context:
        detail["context"] = exc.context

    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return HTTPException(status_code=status_code, detail=detail, headers=headers)


__all__ = [
    "ServiceError",
    "ValidationError",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "TaskNotFoundError",
    "UserNotFoundError",
    "DuplicateError",
    "InternalError",
    "DatabaseError",
    "to_http_exception",
]
