"""
TaskOrbit - REST API for task management.

Main entry point for the TaskOrbit service.
All initialization logic is in app/factory.py.
"""
import logging

import uvicorn

from taskorbit.app import create_app
from taskorbit.config import get_settings
from taskorbit.middleware.logging_setup import setup_logging

settings = get_settings()
setup_logging(settings.log_level)

logger = logging.getLogger(__name__)

# Module-level app for `uvicorn taskorbit.main:app`
app = create_app()


def main():
    config = uvicorn.Config(
        app,
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=True,
        timeout_keep_alive=30,
        timeout_graceful_shutdown=30,
    )
    server = uvicorn.Server(config)

    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    finally:
        # Cleanup is handled by the lifespan context manager in app/factory.py
        logger.info("Service stopped")


if __name__ == "__main__":
    main()
