"""
User record and the pydantic models for user-related requests.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from taskorbit.models.common import utcnow


class UserRole(Enum):
    """User role enumeration."""
    USER = "user"
    ADMIN = "admin"


VALID_ROLES = [role.value for role in UserRole]


class User(BaseModel):
    """Stored user record."""
    id: str
    email: str
    password_hash: str
    name: str
    role: str = UserRole.USER.value
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str) -> str:
        if v not in VALID_ROLES:
            raise ValueError(f"Invalid role '{v}'. Must be one of: {', '.join(VALID_ROLES)}")
        return v

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def to_public(self) -> Dict[str, Any]:
        """JSON-ready view of the user without the password hash."""
        return self.model_dump(mode="json", exclude={"password_hash"})


def _normalize_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if len(v) < 2 or len(v) > 50:
        raise ValueError("Name must be between 2 and 50 characters")
    return v


class RegisterRequest(BaseModel):
    """Request model for registering a user."""
    email: EmailStr = Field(..., description="Email address (case-insensitive)")
    password: str = Field(..., description="Plain text password", min_length=6, max_length=100)
    name: str = Field(..., description="Display name")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _normalize_name(v)


class LoginRequest(BaseModel):
    """Request model for logging in."""
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class ProfileUpdate(BaseModel):
    """Request model for updating the current user's profile."""
    name: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            raise ValueError("Name cannot be null")
        return _normalize_name(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            raise ValueError("Email cannot be null")
        return v.strip().lower()


class ChangePasswordRequest(BaseModel):
    """Request model for changing the current user's password."""
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=6, max_length=100)
