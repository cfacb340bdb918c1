"""
Response Strategy Pattern for handling different HTTP response types.
Provides strategies for 2xx (success), 4xx (client errors), and 5xx (server errors).

Every body uses the same envelope:
    success: {"success": true, "data": ..., "message": ...}
    failure: {"success": false, "message": ..., "errors": [...]?, "stack": ...?}
"""
from typing import Dict, Any, Optional, List
from fastapi import Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
import logging

logger = logging.getLogger(__name__)


def success_body(data: Any = None, message: str = "OK") -> Dict[str, Any]:
    return {"success": True, "data": jsonable_encoder(data), "message": message}


def failure_body(
    message: str,
    errors: Optional[List[Dict[str, Any]]] = None,
    stack: Optional[str] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = jsonable_encoder(errors)
    if stack:
        body["stack"] = stack
    return body


class ResponseStrategy:
    """Base class for response strategies."""

    def render(self, body: Dict[str, Any], status_code: Optional[int] = None,
               headers: Optional[Dict[str, str]] = None) -> Response:
        """Render response with appropriate status code."""
        raise NotImplementedError


class SuccessStrategy(ResponseStrategy):
    """
    Strategy for 2xx success responses.
    Default: 200 OK
    """

    def __init__(self, default_status: int = status.HTTP_200_OK):
        self.default_status = default_status

    def render(self, body, status_code=None, headers=None) -> Response:
        return JSONResponse(content=body, status_code=status_code or self.default_status, headers=headers)


class CreatedStrategy(SuccessStrategy):
    """Strategy for 201 Created responses."""

    def __init__(self):
        super().__init__(default_status=status.HTTP_201_CREATED)


class ClientErrorStrategy(ResponseStrategy):
    """
    Strategy for 4xx client error responses.
    Handles validation errors, not found, unauthorized, etc.
    """

    def render(self, body, status_code=None, headers=None) -> Response:
        code = status_code or status.HTTP_400_BAD_REQUEST
        return JSONResponse(content=body, status_code=code, headers=headers)


class ServerErrorStrategy(ResponseStrategy):
    """
    Strategy for 5xx server error responses.
    Handles internal server errors, service unavailable, etc.
    """

    def render(self, body, status_code=None, headers=None) -> Response:
        code = status_code or status.HTTP_500_INTERNAL_SERVER_ERROR
        logger.error(f"Server error response ({code}): {body.get('message')}")
        return JSONResponse(content=body, status_code=code, headers=headers)


class ResponseContext:
    """
    Context class that uses response strategies.
    Determines which strategy to use based on the operation type and result.
    """

    def __init__(self):
        self.success_strategy = SuccessStrategy()
        self.created_strategy = CreatedStrategy()
        self.client_error_strategy = ClientErrorStrategy()
        self.server_error_strategy = ServerErrorStrategy()

    def render_success(self, data: Any = None, message: str = "OK",
                       status_code: Optional[int] = None) -> Response:
        """Render successful response (default 200)."""
        return self.success_strategy.render(success_body(data, message), status_code)

    def render_created(self, data: Any = None, message: str = "Created") -> Response:
        """Render created response (201)."""
        return self.created_strategy.render(success_body(data, message))

    def render_error(
        self,
        message: str,
        status_code: int,
        errors: Optional[List[Dict[str, Any]]] = None,
        stack: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Response:
        """Render a failure envelope, choosing the 4xx or 5xx strategy by status code."""
        body = failure_body(message, errors=errors, stack=stack)
        if status_code >= 500:
            return self.server_error_strategy.render(body, status_code, headers)
        return self.client_error_strategy.render(body, status_code, headers)


# Global response context instance
response_context = ResponseContext()
