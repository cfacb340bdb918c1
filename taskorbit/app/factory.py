"""
Application factory - creates and configures the FastAPI application.
This isolates all initialization logic from main.py.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from taskorbit.api.response_strategy import response_context
from taskorbit.api.routes import all_routers
from taskorbit.config import get_settings
from taskorbit.dependencies.services import ServiceContainer, get_services
from taskorbit.exceptions.handlers import setup_exception_handlers
from taskorbit.middleware.setup import setup_middleware

logger = logging.getLogger(__name__)

SERVICE_VERSION = "1.0.0"


def _resolve_services(app: FastAPI) -> ServiceContainer:
    override = app.dependency_overrides.get(get_services)
    return override() if override else get_services()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan."""
    logger.info("Application starting up...")
    services = _resolve_services(app)
    logger.info(f"Services initialized (storage: {services.storage.backend_name})")

    if services.settings.seed_on_startup:
        from taskorbit.seed import seed_demo_data
        try:
            seed_demo_data(services)
        except Exception as e:
            logger.warning(f"Demo data seeding failed, continuing without it: {e}", exc_info=True)

    yield

    logger.info("Application shutting down...")


def create_app(services: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        services: Container to serve requests from; defaults to the global container

    Returns:
        Configured FastAPI application
    """
    settings = services.settings if services is not None else get_settings()

    app = FastAPI(
        title="TaskOrbit",
        description="Task management service: users, tasks, assignment and live status updates",
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings

    if services is not None:
        app.dependency_overrides[get_services] = lambda: services

    setup_exception_handlers(app)
    setup_middleware(app, settings)

    for router in all_routers:
        app.include_router(router)

    @app.get("/")
    async def root():
        """Service information."""
        return response_context.render_success(
            {"service": "TaskOrbit", "version": SERVICE_VERSION, "environment": settings.environment},
            "TaskOrbit API is running",
        )

    return app
