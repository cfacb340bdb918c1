"""
Record types and pydantic models for request/response validation.
"""
from .user_models import (
    User,
    UserRole,
    RegisterRequest,
    LoginRequest,
    ProfileUpdate,
    ChangePasswordRequest,
)
from .task_models import (
    Task,
    TaskStatus,
    Priority,
    TaskCreate,
    TaskUpdate,
    TaskAssign,
    TaskFilters,
)

__all__ = [
    "User",
    "UserRole",
    "RegisterRequest",
    "LoginRequest",
    "ProfileUpdate",
    "ChangePasswordRequest",
    "Task",
    "TaskStatus",
    "Priority",
    "TaskCreate",
    "TaskUpdate",
    "TaskAssign",
    "TaskFilters",
]
