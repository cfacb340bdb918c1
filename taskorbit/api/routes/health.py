"""
Health and metrics API routes.
"""
from fastapi import status as http_status

from taskorbit.adapters.http_framework import HTTPFrameworkAdapter
from taskorbit.dependencies.services import ServiceContainer, get_services
from taskorbit.monitoring import METRICS_CONTENT_TYPE, check_storage_health, get_health_info, get_metrics

# Initialize adapters
http_adapter = HTTPFrameworkAdapter()
Response = http_adapter.Response
JSONResponse = http_adapter.JSONResponse
Depends = http_adapter.Depends

router = http_adapter.create_router(tags=["health"])


@router.get("/health")
async def health_check(services: ServiceContainer = Depends(get_services)):
    """Health check endpoint with component status (storage, service)."""
    health_info = get_health_info(services.storage)
    if health_info.get("status") == "unhealthy":
        return JSONResponse(content=health_info, status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE)
    return health_info


@router.get("/health/database")
async def database_health(services: ServiceContainer = Depends(get_services)):
    """Storage connectivity check."""
    result = check_storage_health(services.storage)
    if result["status"] == "unhealthy":
        return JSONResponse(content=result, status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE)
    return result


@router.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=get_metrics(), media_type=METRICS_CONTENT_TYPE)
