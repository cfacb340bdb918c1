"""
Monitoring and observability utilities for the TaskOrbit service.

Provides:
- Prometheus metrics (requests, latencies, errors)
- Request tracing (unique request IDs)
- Health reports for the service and its storage backend
"""
import re
import time
import uuid
import logging
from typing import Callable, Dict, Any, Optional
from contextvars import ContextVar

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware
from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST

from taskorbit.storage.interface import StorageInterface

# Request context variable for tracing
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

# Prometheus metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint', 'status_code'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_errors_total = Counter(
    'http_errors_total',
    'Total number of HTTP errors',
    ['method', 'endpoint', 'status_code', 'error_type']
)

service_uptime_seconds = Gauge(
    'service_uptime_seconds',
    'Service uptime in seconds'
)

METRICS_CONTENT_TYPE = CONTENT_TYPE_LATEST

service_start_time = time.time()

_UUID_PATTERN = re.compile(r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}', re.IGNORECASE)

logger = logging.getLogger(__name__)


def get_request_id() -> str:
    """Get the current request ID from context."""
    return request_id_var.get('')


def set_request_id(request_id: str) -> None:
    """Set the request ID in context."""
    request_id_var.set(request_id)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware for collecting Prometheus metrics and request tracing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Honour an incoming request id so traces can span services
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        set_request_id(request_id)

        endpoint = self._get_endpoint_path(request.url.path)
        start_time = time.time()
        service_uptime_seconds.set(time.time() - service_start_time)

        logger.debug(f"Request started: {request.method} {request.url.path}")

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"Request failed with exception: {request.method} {request.url.path} "
                f"({type(e).__name__}) after {duration:.3f}s",
                exc_info=True,
            )
            http_errors_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                error_type="exception"
            ).inc()
            raise

        status_code = response.status_code
        duration = time.time() - start_time
        logger.info(f"{request.method} {request.url.path} -> {status_code} in {duration:.3f}s")

        http_requests_total.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=status_code
        ).inc()
        http_request_duration_seconds.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=status_code
        ).observe(duration)

        if status_code >= 400:
            error_type = "client_error" if status_code < 500 else "server_error"
            http_errors_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code,
                error_type=error_type
            ).inc()

        response.headers["X-Request-ID"] = request_id
        return response

    @staticmethod
    def _get_endpoint_path(path: str) -> str:
        """Normalize endpoint path for metrics (replace IDs with a placeholder)."""
        path = _UUID_PATTERN.sub('{id}', path)
        path = re.sub(r'/\d+', '/{id}', path)
        if len(path) > 100:
            path = path[:100]
        return path


def get_metrics() -> str:
    """Get Prometheus metrics in text format."""
    return generate_latest().decode('utf-8')


def check_storage_health(storage: StorageInterface) -> Dict[str, Any]:
    """
    Check storage connectivity.

    Args:
        storage: Storage backend to ping

    Returns:
        Dictionary with storage health status
    """
    start_time = time.time()
    try:
        storage.ping()
    except Exception as e:
        response_time_ms = round((time.time() - start_time) * 1000, 2)
        logger.warning(f"Storage health check failed: {type(e).__name__}: {e}")
        return {
            "status": "unhealthy",
            "connectivity": "disconnected",
            "response_time_ms": response_time_ms,
            "type": storage.backend_name,
            "error": str(e),
            "error_type": type(e).__name__
        }

    return {
        "status": "healthy",
        "connectivity": "connected",
        "response_time_ms": round((time.time() - start_time) * 1000, 2),
        "type": storage.backend_name
    }


def get_health_info(storage: Optional[StorageInterface] = None) -> Dict[str, Any]:
    """
    Get health information including uptime and component status.

    Args:
        storage: Optional storage backend for connectivity checks

    Returns:
        Dictionary with overall status and per-component statuses
    """
    uptime = time.time() - service_start_time
    components: Dict[str, Any] = {
        "service": {
            "status": "healthy",
            "uptime_seconds": uptime,
            "uptime_formatted": _format_uptime(uptime)
        }
    }
    overall_status = "healthy"

    if storage is not None:
        components["database"] = check_storage_health(storage)
        if components["database"]["status"] == "unhealthy":
            overall_status = "unhealthy"

    return {
        "status": overall_status,
        "service": "taskorbit",
        "timestamp": time.time(),
        "uptime_seconds": uptime,
        "uptime_formatted": _format_uptime(uptime),
        "components": components
    }


def _format_uptime(seconds: float) -> str:
    """Format uptime in human-readable format."""
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if days > 0:
        return f"{days}d {hours}h {minutes}m {secs}s"
    elif hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    elif minutes > 0:
        return f"{minutes}m {secs}s"
    else:
        return f"{secs}s"
