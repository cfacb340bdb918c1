"""
Auth service - registration, login and account self-service.
This layer contains no HTTP framework dependencies.
"""
import logging
from typing import Any, Dict, Optional

from taskorbit.auth.passwords import hash_password, verify_password
from taskorbit.auth.tokens import create_access_token, decode_token
from taskorbit.config import Settings
from taskorbit.exceptions import AuthenticationError, UserNotFoundError
from taskorbit.models.user_models import User
from taskorbit.services.user_service import UserService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """Service for authentication business logic."""

    def __init__(self, user_service: UserService, settings: Settings):
        self.user_service = user_service
        self.settings = settings
        self._unknown_user_hash: Optional[str] = None

    def _session(self, user: User) -> Dict[str, Any]:
        return {"user": user.to_public(), "token": create_access_token(user, self.settings)}

    def _dummy_hash(self) -> str:
        if self._unknown_user_hash is None:
            self._unknown_user_hash = hash_password("unknown-user", rounds=self.settings.bcrypt_rounds)
        return self._unknown_user_hash

    def register(self, email: str, password: str, name: str) -> Dict[str, Any]:
        """
        Register a new user and issue a token.

        Returns:
            {"user": public user fields, "token": access token}

        Raises:
            DuplicateError: If the email is already registered
        """
        password_hash = hash_password(password, rounds=self.settings.bcrypt_rounds)
        user = self.user_service.create_user(email=email, password_hash=password_hash, name=name)
        logger.info(f"Registered user {user.id}")
        return self._session(user)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Verify credentials and issue a token.

        Unknown email, inactive account and wrong password are reported with
        the same message.

        Raises:
            AuthenticationError: If the credentials are rejected
        """
        try:
            user = self.user_service.get_user_by_email(email)
        except UserNotFoundError:
            # Unknown emails pay the same bcrypt cost as a real check
            verify_password(password, self._dummy_hash())
            logger.info("Login failed: unknown email")
            raise AuthenticationError(INVALID_CREDENTIALS)

        password_ok = verify_password(password, user.password_hash)
        if not user.is_active or not password_ok:
            logger.info(f"Login failed for user {user.id}")
            raise AuthenticationError(INVALID_CREDENTIALS)

        logger.info(f"User {user.id} logged in")
        return self._session(user)

    def authenticate_token(self, token: str) -> User:
        """
        Resolve a bearer token to an active user.

        Raises:
            AuthenticationError: If the token is invalid or the user is gone or inactive
        """
        payload = decode_token(token, self.settings)
        try:
            user = self.user_service.get_user(payload["sub"])
        except UserNotFoundError:
            raise AuthenticationError("User not found")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")
        return user

    def get_profile(self, user_id: str) -> User:
        return self.user_service.get_user(user_id)

    def update_profile(self, user_id: str, name: Optional[str] = None, email: Optional[str] = None) -> User:
        """Update the caller's name and/or email."""
        fields: Dict[str, Any] = {}
        if name is not None:
            fields["name"] = name
        if email is not None:
            fields["email"] = email
        return self.user_service.update_user(user_id, fields)

    def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        """
        Replace the caller's password.

        Raises:
            AuthenticationError: If current_password does not match
        """
        user = self.user_service.get_user(user_id)
        if not verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")
        password_hash = hash_password(new_password, rounds=self.settings.bcrypt_rounds)
        self.user_service.update_user(user_id, {"password_hash": password_hash})
        logger.info(f"Password changed for user {user_id}")
