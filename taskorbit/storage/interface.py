"""
Storage interface - defines the contract for all storage backends.

Backends report a missing record as None and wrap every backend failure in
StorageError so services can classify it without knowing the backend.
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from taskorbit.models.task_models import Task, TaskFilters
from taskorbit.models.user_models import User


class StorageError(Exception):
    """Raised when a storage backend call fails."""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class StorageInterface(ABC):
    """Abstract interface for storage operations."""

    # User operations
    @abstractmethod
    def create_user(self, user: User) -> User:
        """Persist a new user and return it."""
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        """Get a user by ID."""
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by (lower-cased) email."""
        pass

    @abstractmethod
    def update_user(self, user: User) -> User:
        """Re-persist a full user record."""
        pass

    @abstractmethod
    def delete_user(self, user_id: str) -> None:
        """Remove a user."""
        pass

    @abstractmethod
    def list_users(self) -> List[User]:
        """List all users."""
        pass

    # Task operations
    @abstractmethod
    def create_task(self, task: Task) -> Task:
        """Persist a new task and return it."""
        pass

    @abstractmethod
    def get_task(self, task_id: str) -> Optional[Task]:
        """Get a task by ID."""
        pass

    @abstractmethod
    def update_task(self, task: Task) -> Task:
        """Re-persist a full task record."""
        pass

    @abstractmethod
    def delete_task(self, task_id: str) -> None:
        """Remove a task."""
        pass

    @abstractmethod
    def list_tasks(
        self,
        filters: Optional[TaskFilters] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[Task], int]:
        """
        List tasks newest first.

        Returns:
            (page of tasks, total number of tasks matching the filters)
        """
        pass

    @abstractmethod
    def ping(self) -> None:
        """Raise StorageError if the backend is unreachable."""
        pass

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Short backend identifier for health reports."""
        pass
