"""
Tests for the /ws/tasks push channel.
"""
import pytest
from fastapi.testclient import TestClient

from taskorbit.app import create_app
from taskorbit.notifications.broadcaster import TASK_STATUS_CHANGED


@pytest.fixture
def client(services):
    with TestClient(create_app(services)) as test_client:
        yield test_client


@pytest.fixture
def headers(client):
    token = client.post(
        "/auth/register", json={"email": "alice@example.com", "password": "secret1", "name": "Alice"}
    ).json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


class TestTaskEvents:

    def test_status_change_is_pushed(self, client, headers):
        task = client.post("/tasks", json={"title": "A", "status": "pending"}, headers=headers).json()["data"]

        with client.websocket_connect("/ws/tasks") as websocket:
            # Description-only edits are not announced, so the first message is the status change
            client.put(f"/tasks/{task['id']}", json={"description": "details"}, headers=headers)
            client.put(f"/tasks/{task['id']}", json={"status": "completed"}, headers=headers)

            message = websocket.receive_json()

        assert message["event"] == TASK_STATUS_CHANGED
        assert message["data"]["id"] == task["id"]
        assert message["data"]["status"] == "completed"
        assert message["data"]["description"] == "details"
        assert message["data"]["completed_at"] is not None

    def test_every_listener_gets_the_event(self, client, headers, services):
        task = client.post("/tasks", json={"title": "B"}, headers=headers).json()["data"]

        with client.websocket_connect("/ws/tasks") as first, client.websocket_connect("/ws/tasks") as second:
            assert services.broadcaster.subscriber_count == 2
            client.put(f"/tasks/{task['id']}", json={"status": "in_progress"}, headers=headers)

            assert first.receive_json()["data"]["status"] == "in_progress"
            assert second.receive_json()["data"]["status"] == "in_progress"
