"""
User service - business logic for user records.
This layer contains no HTTP framework dependencies.
"""
import logging
from typing import Any, Dict, List

from taskorbit.exceptions import DatabaseError, DuplicateError, UserNotFoundError
from taskorbit.models.common import new_id, utcnow
from taskorbit.models.user_models import User, UserRole
from taskorbit.storage.interface import StorageError, StorageInterface

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"email", "name", "role", "is_active", "password_hash"}


class UserService:
    """Service for user business logic."""

    def __init__(self, storage: StorageInterface):
        """Initialize user service with storage dependency."""
        self.storage = storage

    def create_user(self, email: str, password_hash: str, name: str, role: str = UserRole.USER.value) -> User:
        """
        Create a new user.

        Args:
            email: Email address, stored lower-cased
            password_hash: bcrypt hash of the password
            name: Display name
            role: "user" or "admin"

        Returns:
            Stored user

        Raises:
            DuplicateError: If the email is already registered
            DatabaseError: If storage fails
        """
        email = email.strip().lower()
        try:
            if self.storage.get_user_by_email(email) is not None:
                raise DuplicateError("User", "email", email, message="User with this email already exists")
            now = utcnow()
            user = User(
                id=new_id(),
                email=email,
                password_hash=password_hash,
                name=name,
                role=role,
                created_at=now,
                updated_at=now,
            )
            self.storage.create_user(user)
        except StorageError as e:
            logger.error(f"Failed to create user {email}: {e}", exc_info=True)
            raise DatabaseError("Failed to create user", operation="create_user", original_error=e)

        logger.info(f"Created user {user.id} ({email})")
        return user

    def get_user(self, user_id: str) -> User:
        """Get a user by ID, raising UserNotFoundError if absent."""
        try:
            user = self.storage.get_user(user_id)
        except StorageError as e:
            logger.error(f"Failed to load user {user_id}: {e}", exc_info=True)
            raise DatabaseError("Failed to load user", operation="get_user", original_error=e)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def get_user_by_email(self, email: str) -> User:
        try:
            user = self.storage.get_user_by_email(email.strip().lower())
        except StorageError as e:
            logger.error(f"Failed to load user by email: {e}", exc_info=True)
            raise DatabaseError("Failed to load user", operation="get_user_by_email", original_error=e)
        if user is None:
            raise UserNotFoundError(email)
        return user

    def list_users(self) -> List[User]:
        try:
            return self.storage.list_users()
        except StorageError as e:
            logger.error(f"Failed to list users: {e}", exc_info=True)
            raise DatabaseError("Failed to list users", operation="list_users", original_error=e)

    def update_user(self, user_id: str, fields: Dict[str, Any]) -> User:
        """
        Merge fields into a stored user.

        Args:
            user_id: User to update
            fields: Subset of email, name, role, is_active, password_hash

        Returns:
            Updated user

        Raises:
            UserNotFoundError: If the user does not exist
            DuplicateError: If the new email belongs to another user
            DatabaseError: If storage fails
        """
        user = self.get_user(user_id)
        changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()

        try:
            if "email" in changes and changes["email"] != user.email:
                existing = self.storage.get_user_by_email(changes["email"])
                if existing is not None and existing.id != user.id:
                    raise DuplicateError("User", "email", changes["email"], message="Email already in use")
            updated = user.model_copy(update={**changes, "updated_at": utcnow()})
            # Re-validate so role stays within its enumeration
            updated = User.model_validate(updated.model_dump())
            self.storage.update_user(updated)
        except StorageError as e:
            logger.error(f"Failed to update user {user_id}: {e}", exc_info=True)
            raise DatabaseError("Failed to update user", operation="update_user", original_error=e)
        return updated

    def delete_user(self, user_id: str) -> None:
        """Hard-delete a user. Tasks they created are removed with them."""
        self.get_user(user_id)
        try:
            self.storage.delete_user(user_id)
        except StorageError as e:
            logger.error(f"Failed to delete user {user_id}: {e}", exc_info=True)
            raise DatabaseError("Failed to delete user", operation="delete_user", original_error=e)
        logger.info(f"Deleted user {user_id}")
