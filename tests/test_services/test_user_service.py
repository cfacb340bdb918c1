"""
Unit tests for UserService.
"""
from unittest.mock import MagicMock

import pytest

from taskorbit.exceptions import DatabaseError, DuplicateError, UserNotFoundError
from taskorbit.services.user_service import UserService
from taskorbit.storage.interface import StorageError


@pytest.fixture
def user_service(services):
    return services.user_service


class TestCreateUser:

    def test_create_user_defaults(self, user_service):
        user = user_service.create_user("  Alice@Example.COM ", "hash", "Alice")
        assert user.email == "alice@example.com"
        assert user.role == "user"
        assert user.is_active is True
        assert user_service.get_user(user.id) == user

    def test_create_admin(self, user_service):
        user = user_service.create_user("root@example.com", "hash", "Root", role="admin")
        assert user.is_admin

    def test_duplicate_email(self, user_service):
        user_service.create_user("alice@example.com", "hash", "Alice")
        with pytest.raises(DuplicateError, match="already exists"):
            user_service.create_user("ALICE@example.com", "hash", "Other Alice")

    def test_storage_failure(self):
        storage = MagicMock()
        storage.get_user_by_email.return_value = None
        storage.create_user.side_effect = StorageError("locked")
        with pytest.raises(DatabaseError, match="Failed to create user"):
            UserService(storage).create_user("a@example.com", "hash", "Al")


class TestLookup:

    def test_get_missing(self, user_service):
        with pytest.raises(UserNotFoundError, match="User not found"):
            user_service.get_user("00000000-0000-4000-8000-000000000000")

    def test_get_by_email(self, user_service):
        user = user_service.create_user("alice@example.com", "hash", "Alice")
        assert user_service.get_user_by_email("ALICE@example.com").id == user.id

    def test_get_by_email_missing(self, user_service):
        with pytest.raises(UserNotFoundError):
            user_service.get_user_by_email("ghost@example.com")

    def test_list_users(self, user_service):
        user_service.create_user("alice@example.com", "hash", "Alice")
        user_service.create_user("bob@example.com", "hash", "Bob")
        assert len(user_service.list_users()) == 2


class TestUpdateUser:

    def test_update_name(self, user_service):
        user = user_service.create_user("alice@example.com", "hash", "Alice")
        updated = user_service.update_user(user.id, {"name": "Alice B"})
        assert updated.name == "Alice B"
        assert user_service.get_user(user.id).name == "Alice B"

    def test_ignores_unknown_fields(self, user_service):
        user = user_service.create_user("alice@example.com", "hash", "Alice")
        updated = user_service.update_user(user.id, {"id": "other", "name": "Al"})
        assert updated.id == user.id

    def test_email_taken(self, user_service):
        user_service.create_user("alice@example.com", "hash", "Alice")
        bob = user_service.create_user("bob@example.com", "hash", "Bob")
        with pytest.raises(DuplicateError):
            user_service.update_user(bob.id, {"email": "alice@example.com"})

    def test_invalid_role_rejected(self, user_service):
        user = user_service.create_user("alice@example.com", "hash", "Alice")
        with pytest.raises(ValueError):
            user_service.update_user(user.id, {"role": "superuser"})


class TestDeleteUser:

    def test_delete(self, user_service):
        user = user_service.create_user("alice@example.com", "hash", "Alice")
        user_service.delete_user(user.id)
        with pytest.raises(UserNotFoundError):
            user_service.get_user(user.id)

    def test_delete_missing(self, user_service):
        with pytest.raises(UserNotFoundError):
            user_service.delete_user("00000000-0000-4000-8000-000000000000")
