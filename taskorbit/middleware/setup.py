"""
Middleware setup and configuration.
"""
from fastapi.middleware.cors import CORSMiddleware

from taskorbit.config import Settings
from taskorbit.monitoring import MetricsMiddleware


def setup_middleware(app, settings: Settings):
    """Set up all middleware for the FastAPI application."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.cors_origin.split(",") if origin.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Added last so it wraps CORS and sees every response
    app.add_middleware(MetricsMiddleware)
