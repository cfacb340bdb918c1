"""
Authentication and authorization dependencies for FastAPI.
"""
from typing import Optional

from taskorbit.adapters.http_framework import HTTPFrameworkAdapter
from taskorbit.dependencies.services import get_auth_service
from taskorbit.exceptions import AuthenticationError, PermissionDeniedError
from taskorbit.models.user_models import User
from taskorbit.services.auth_service import AuthService

# Initialize adapters
http_adapter = HTTPFrameworkAdapter()
Request = http_adapter.Request
HTTPAuthorizationCredentials = http_adapter.HTTPAuthorizationCredentials
Depends = http_adapter.Depends

bearer_scheme = http_adapter.HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Resolve the Authorization: Bearer token to the calling user.

    Returns:
        Active user the token was issued to
    Raises:
        AuthenticationError (401) if the token is missing, invalid or expired
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token required")

    user = auth_service.authenticate_token(credentials.credentials)
    request.state.user_id = user.id
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """
    Verify that the caller is an administrator.

    Raises:
        PermissionDeniedError (403) if not admin
    """
    if not user.is_admin:
        raise PermissionDeniedError("Admin privileges required")
    return user
