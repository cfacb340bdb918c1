"""
Authentication API routes.
"""
import logging

from taskorbit.adapters.http_framework import HTTPFrameworkAdapter
from taskorbit.api.response_strategy import response_context
from taskorbit.auth.dependencies import get_current_user
from taskorbit.dependencies.services import get_auth_service
from taskorbit.models.user_models import LoginRequest, RegisterRequest, User
from taskorbit.services.auth_service import AuthService

logger = logging.getLogger(__name__)

http_adapter = HTTPFrameworkAdapter()
Depends = http_adapter.Depends

router = http_adapter.create_router(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201)
async def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new account and return it with an access token."""
    session = auth_service.register(request.email, request.password, request.name)
    return response_context.render_created(session, "User registered successfully")


@router.post("/login")
async def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Exchange email and password for an access token."""
    session = auth_service.login(request.email, request.password)
    return response_context.render_success(session, "Login successful")


@router.post("/logout")
async def logout(user: User = Depends(get_current_user)):
    """Tokens are stateless; clients discard theirs."""
    logger.info(f"User {user.id} logged out")
    return response_context.render_success(None, "Logout successful")
