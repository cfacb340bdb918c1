"""
Unit tests for AuthService.
"""
from unittest.mock import patch

import pytest

from taskorbit.auth.passwords import verify_password
from taskorbit.auth.tokens import decode_token
from taskorbit.exceptions import AuthenticationError, DuplicateError


@pytest.fixture
def auth_service(services):
    return services.auth_service


@pytest.fixture
def registered(auth_service):
    return auth_service.register("alice@example.com", "secret1", "Alice")


class TestRegister:

    def test_returns_public_user_and_token(self, auth_service, settings, registered):
        assert registered["user"]["email"] == "alice@example.com"
        assert "password_hash" not in registered["user"]
        payload = decode_token(registered["token"], settings)
        assert payload["sub"] == registered["user"]["id"]

    def test_password_is_hashed(self, services, registered):
        stored = services.user_service.get_user(registered["user"]["id"])
        assert stored.password_hash != "secret1"
        assert verify_password("secret1", stored.password_hash)

    def test_duplicate_email(self, auth_service, registered):
        with pytest.raises(DuplicateError):
            auth_service.register("Alice@example.com", "another1", "Alice Again")


class TestLogin:

    def test_success(self, auth_service, registered):
        session = auth_service.login("alice@example.com", "secret1")
        assert session["user"]["id"] == registered["user"]["id"]
        assert session["token"]

    def test_wrong_password_and_unknown_email_look_the_same(self, auth_service, registered):
        with pytest.raises(AuthenticationError) as wrong_password:
            auth_service.login("alice@example.com", "nope-nope")
        with pytest.raises(AuthenticationError) as unknown_email:
            auth_service.login("nobody@example.com", "secret1")
        assert wrong_password.value.message == unknown_email.value.message == "Invalid credentials"

    def test_inactive_user(self, auth_service, services, registered):
        services.user_service.update_user(registered["user"]["id"], {"is_active": False})
        with pytest.raises(AuthenticationError, match="Invalid credentials"):
            auth_service.login("alice@example.com", "secret1")

    def test_unknown_email_still_checks_a_password(self, auth_service):
        with patch("taskorbit.services.auth_service.verify_password", wraps=verify_password) as checker:
            with pytest.raises(AuthenticationError, match="Invalid credentials"):
                auth_service.login("nobody@example.com", "secret1")
        checker.assert_called_once()

    def test_inactive_user_still_checks_the_password(self, auth_service, services, registered):
        services.user_service.update_user(registered["user"]["id"], {"is_active": False})
        with patch("taskorbit.services.auth_service.verify_password", wraps=verify_password) as checker:
            with pytest.raises(AuthenticationError):
                auth_service.login("alice@example.com", "secret1")
        checker.assert_called_once()


class TestAuthenticateToken:

    def test_resolves_user(self, auth_service, registered):
        user = auth_service.authenticate_token(registered["token"])
        assert user.id == registered["user"]["id"]

    def test_deleted_user(self, auth_service, services, registered):
        services.user_service.delete_user(registered["user"]["id"])
        with pytest.raises(AuthenticationError):
            auth_service.authenticate_token(registered["token"])

    def test_garbage_token(self, auth_service):
        with pytest.raises(AuthenticationError, match="Invalid token"):
            auth_service.authenticate_token("not-a-jwt")


class TestProfile:

    def test_update_profile(self, auth_service, registered):
        user = auth_service.update_profile(registered["user"]["id"], name="Alice Cooper", email="ac@example.com")
        assert user.name == "Alice Cooper"
        assert user.email == "ac@example.com"
        assert auth_service.login("ac@example.com", "secret1")["user"]["name"] == "Alice Cooper"

    def test_change_password(self, auth_service, registered):
        auth_service.change_password(registered["user"]["id"], "secret1", "newsecret")
        assert auth_service.login("alice@example.com", "newsecret")
        with pytest.raises(AuthenticationError):
            auth_service.login("alice@example.com", "secret1")

    def test_change_password_wrong_current(self, auth_service, registered):
        with pytest.raises(AuthenticationError, match="Current password is incorrect"):
            auth_service.change_password(registered["user"]["id"], "wrong-one", "newsecret")
