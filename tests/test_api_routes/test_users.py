"""
Route tests for /users.
"""
import pytest
from fastapi.testclient import TestClient

from taskorbit.app import create_app
from taskorbit.auth.passwords import hash_password
from taskorbit.auth.tokens import create_access_token


@pytest.fixture
def client(services):
    with TestClient(create_app(services)) as test_client:
        yield test_client


def headers_for(user, settings):
    return {"Authorization": f"Bearer {create_access_token(user, settings)}"}


@pytest.fixture
def alice(services):
    return services.user_service.create_user(
        "alice@example.com", hash_password("secret1", rounds=4), "Alice"
    )


@pytest.fixture
def admin(services):
    return services.user_service.create_user(
        "admin@example.com", hash_password("admin123", rounds=4), "Admin", role="admin"
    )


class TestProfile:

    def test_get_profile(self, client, alice, settings):
        response = client.get("/users/profile", headers=headers_for(alice, settings))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == alice.id
        assert "password_hash" not in data

    def test_update_profile(self, client, alice, settings):
        response = client.put(
            "/users/profile", json={"name": "Alice Cooper"}, headers=headers_for(alice, settings)
        )
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Alice Cooper"
        assert response.json()["data"]["email"] == "alice@example.com"

    def test_update_profile_email_taken(self, client, alice, admin, settings):
        response = client.put(
            "/users/profile", json={"email": "admin@example.com"}, headers=headers_for(alice, settings)
        )
        assert response.status_code == 409

    def test_inactive_user_rejected(self, client, services, alice, settings):
        services.user_service.update_user(alice.id, {"is_active": False})
        response = client.get("/users/profile", headers=headers_for(alice, settings))
        assert response.status_code == 401


class TestChangePassword:

    def test_change_password(self, client, alice, settings):
        response = client.put(
            "/users/change-password",
            json={"currentPassword": "secret1", "newPassword": "better-secret"},
            headers=headers_for(alice, settings),
        )
        assert response.status_code == 200
        login = client.post("/auth/login", json={"email": "alice@example.com", "password": "better-secret"})
        assert login.status_code == 200

    def test_wrong_current_password(self, client, alice, settings):
        response = client.put(
            "/users/change-password",
            json={"currentPassword": "nope", "newPassword": "better-secret"},
            headers=headers_for(alice, settings),
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Current password is incorrect"

    def test_new_password_too_short(self, client, alice, settings):
        response = client.put(
            "/users/change-password",
            json={"currentPassword": "secret1", "newPassword": "123"},
            headers=headers_for(alice, settings),
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "newPassword"


class TestAdminRoutes:

    def test_list_requires_admin(self, client, alice, settings):
        response = client.get("/users", headers=headers_for(alice, settings))
        assert response.status_code == 403
        assert response.json()["message"] == "Admin privileges required"

    def test_list_users(self, client, alice, admin, settings):
        response = client.get("/users", headers=headers_for(admin, settings))
        assert response.status_code == 200
        emails = {u["email"] for u in response.json()["data"]}
        assert emails == {"alice@example.com", "admin@example.com"}

    def test_get_user(self, client, alice, admin, settings):
        response = client.get(f"/users/{alice.id}", headers=headers_for(admin, settings))
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Alice"

    def test_get_missing_user(self, client, admin, settings):
        response = client.get("/users/00000000-0000-4000-8000-000000000000", headers=headers_for(admin, settings))
        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

    def test_delete_user(self, client, alice, admin, settings):
        response = client.delete(f"/users/{alice.id}", headers=headers_for(admin, settings))
        assert response.status_code == 200
        response = client.get(f"/users/{alice.id}", headers=headers_for(admin, settings))
        assert response.status_code == 404
