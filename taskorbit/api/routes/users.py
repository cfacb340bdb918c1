"""
User account API routes.
"""
import logging
from uuid import UUID

from taskorbit.adapters.http_framework import HTTPFrameworkAdapter
from taskorbit.api.response_strategy import response_context
from taskorbit.auth.dependencies import get_current_user, require_admin
from taskorbit.dependencies.services import get_auth_service, get_user_service
from taskorbit.models.user_models import ChangePasswordRequest, ProfileUpdate, User
from taskorbit.services.auth_service import AuthService
from taskorbit.services.user_service import UserService

logger = logging.getLogger(__name__)

http_adapter = HTTPFrameworkAdapter()
Depends = http_adapter.Depends

router = http_adapter.create_router(prefix="/users", tags=["users"])


@router.get("/profile")
async def get_profile(user: User = Depends(get_current_user)):
    """Get the calling user's profile."""
    return response_context.render_success(user.to_public(), "Profile retrieved successfully")


@router.put("/profile")
async def update_profile(
    update: ProfileUpdate,
    user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Update the calling user's name and/or email."""
    updated = auth_service.update_profile(user.id, name=update.name, email=update.email)
    return response_context.render_success(updated.to_public(), "Profile updated successfully")


@router.put("/change-password")
async def change_password(
    request: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Change the calling user's password."""
    auth_service.change_password(user.id, request.current_password, request.new_password)
    return response_context.render_success(None, "Password changed successfully")


@router.get("")
async def list_users(
    admin: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
):
    """List all users (admin only)."""
    users = [u.to_public() for u in user_service.list_users()]
    return response_context.render_success(users, "Users retrieved successfully")


@router.get("/{user_id}")
async def get_user(
    user_id: UUID,
    admin: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
):
    """Get a user by ID (admin only)."""
    user = user_service.get_user(str(user_id))
    return response_context.render_success(user.to_public(), "User retrieved successfully")


@router.delete("/{user_id}")
async def delete_user(
    user_id: UUID,
    admin: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
):
    """Delete a user and the tasks they created (admin only)."""
    user_service.delete_user(str(user_id))
    logger.info(f"Admin {admin.id} deleted user {user_id}")
    return response_context.render_success(None, "User deleted successfully")
