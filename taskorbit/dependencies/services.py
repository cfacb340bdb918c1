"""
Service container for dependency injection.
Centralizes service initialization and provides access to all services.
"""
import logging
from typing import Optional

from fastapi import Depends

from taskorbit.config import Settings, get_settings
from taskorbit.notifications.broadcaster import StatusBroadcaster
from taskorbit.services import AuthService, TaskService, UserService
from taskorbit.storage import StorageInterface, create_storage

logger = logging.getLogger(__name__)

# Global service instance
_service_instance: Optional['ServiceContainer'] = None


class ServiceContainer:
    """Container for all application services."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        storage: Optional[StorageInterface] = None,
        broadcaster: Optional[StatusBroadcaster] = None,
    ):
        self.settings = settings or get_settings()
        self.storage = storage or create_storage(self.settings)
        self.broadcaster = broadcaster or StatusBroadcaster()

        self.user_service = UserService(self.storage)
        self.task_service = TaskService(self.storage, self.broadcaster)
        self.auth_service = AuthService(self.user_service, self.settings)
        logger.info(f"Service container ready (storage: {self.storage.backend_name})")


def get_services() -> ServiceContainer:
    """Get the global service container instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = ServiceContainer()
    return _service_instance


def get_settings_dependency(services: ServiceContainer = Depends(get_services)) -> Settings:
    return services.settings


def get_user_service(services: ServiceContainer = Depends(get_services)) -> UserService:
    return services.user_service


def get_task_service(services: ServiceContainer = Depends(get_services)) -> TaskService:
    return services.task_service


def get_auth_service(services: ServiceContainer = Depends(get_services)) -> AuthService:
    return services.auth_service


def get_broadcaster(services: ServiceContainer = Depends(get_services)) -> StatusBroadcaster:
    return services.broadcaster
