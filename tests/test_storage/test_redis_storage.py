"""
Tests for the Redis storage backend using an in-memory fake client.
"""
from datetime import datetime, timedelta, UTC
from unittest.mock import MagicMock

import pytest
import redis

from fakes import FakeRedis
from taskorbit.models.common import new_id
from taskorbit.models.task_models import Task, TaskFilters
from taskorbit.models.user_models import User
from taskorbit.storage.interface import StorageError
from taskorbit.storage.redis_storage import RedisStorage


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def redis_storage(fake_redis):
    return RedisStorage(client=fake_redis)


@pytest.fixture
def owner(redis_storage):
    return redis_storage.create_user(
        User(id=new_id(), email="alice@example.com", password_hash="hash", name="Alice")
    )


def make_task(created_by, title="Write tests", created_at=None, **kwargs):
    created_at = created_at or datetime.now(UTC)
    return Task(id=new_id(), title=title, created_by=created_by,
                created_at=created_at, updated_at=created_at, **kwargs)


class TestKeyLayout:

    def test_user_hash_index_and_email_key(self, fake_redis, owner):
        assert fake_redis.hashes[f"user:{owner.id}"]["email"] == "alice@example.com"
        assert owner.id in fake_redis.sets["users"]
        assert fake_redis.strings["user_email:alice@example.com"] == owner.id

    def test_task_hash_encoding(self, fake_redis, redis_storage, owner):
        task = redis_storage.create_task(make_task(
            owner.id, tags=["x", "y"], estimated_hours=3.0, assignee_id=owner.id,
        ))
        stored = fake_redis.hashes[f"task:{task.id}"]
        assert stored["title"] == "Write tests"
        assert stored["tags"] == '["x", "y"]'
        assert stored["estimated_hours"] == "3.0"
        # None fields are not written
        assert "description" not in stored
        assert "completed_at" not in stored
        assert task.id in fake_redis.sets["tasks"]

    def test_requires_url_or_client(self):
        with pytest.raises(ValueError):
            RedisStorage()


class TestUsers:

    def test_round_trip(self, redis_storage, owner):
        loaded = redis_storage.get_user(owner.id)
        assert loaded == owner
        assert loaded.is_active is True

    def test_lookup_by_email(self, redis_storage, owner):
        assert redis_storage.get_user_by_email("ALICE@example.com").id == owner.id
        assert redis_storage.get_user_by_email("nobody@example.com") is None

    def test_email_change_moves_lookup_key(self, fake_redis, redis_storage, owner):
        owner.email = "alice.b@example.com"
        redis_storage.update_user(owner)
        assert "user_email:alice@example.com" not in fake_redis.strings
        assert redis_storage.get_user_by_email("alice.b@example.com").id == owner.id

    def test_delete_removes_owned_tasks_and_assignments(self, fake_redis, redis_storage, owner):
        other = redis_storage.create_user(
            User(id=new_id(), email="bob@example.com", password_hash="hash", name="Bob")
        )
        owned = redis_storage.create_task(make_task(owner.id))
        assigned = redis_storage.create_task(make_task(other.id, assignee_id=owner.id))

        redis_storage.delete_user(owner.id)

        assert redis_storage.get_user(owner.id) is None
        assert owner.id not in fake_redis.sets["users"]
        assert redis_storage.get_task(owned.id) is None
        assert redis_storage.get_task(assigned.id).assignee_id is None


class TestTasks:

    def test_round_trip(self, redis_storage, owner):
        due = datetime(2030, 1, 1, tzinfo=UTC)
        task = redis_storage.create_task(make_task(owner.id, due_date=due, tags=["a"], actual_hours=1.5))
        loaded = redis_storage.get_task(task.id)
        assert loaded == task

    def test_update_removes_cleared_fields(self, fake_redis, redis_storage, owner):
        task = redis_storage.create_task(make_task(owner.id, description="old"))
        task.description = None
        redis_storage.update_task(task)
        assert "description" not in fake_redis.hashes[f"task:{task.id}"]
        assert redis_storage.get_task(task.id).description is None

    def test_delete(self, fake_redis, redis_storage, owner):
        task = redis_storage.create_task(make_task(owner.id))
        redis_storage.delete_task(task.id)
        assert redis_storage.get_task(task.id) is None
        assert task.id not in fake_redis.sets["tasks"]

    def test_list_filters_orders_and_pages(self, redis_storage, owner):
        base = datetime(2024, 1, 1, tzinfo=UTC)
        for i in range(4):
            redis_storage.create_task(make_task(
                owner.id, title=f"Task {i}", created_at=base + timedelta(hours=i),
                priority="high" if i % 2 else "low",
            ))

        tasks, total = redis_storage.list_tasks(offset=1, limit=2)
        assert total == 4
        assert [t.title for t in tasks] == ["Task 2", "Task 1"]

        tasks, total = redis_storage.list_tasks(TaskFilters(priority="high"))
        assert total == 2
        assert [t.title for t in tasks] == ["Task 3", "Task 1"]

        tasks, total = redis_storage.list_tasks(TaskFilters(search="task 0"))
        assert [t.title for t in tasks] == ["Task 0"]

    def test_due_date_range_accepts_naive_bounds(self, redis_storage, owner):
        day = datetime(2030, 6, 1, tzinfo=UTC)
        redis_storage.create_task(make_task(owner.id, title="before", due_date=day - timedelta(days=1)))
        redis_storage.create_task(make_task(owner.id, title="on", due_date=day))
        redis_storage.create_task(make_task(owner.id, title="none"))

        tasks, _ = redis_storage.list_tasks(
            TaskFilters(due_date_from=datetime(2030, 6, 1), due_date_to=datetime(2030, 6, 1))
        )
        assert [t.title for t in tasks] == ["on"]

    def test_search_treats_wildcards_literally(self, redis_storage, owner):
        redis_storage.create_task(make_task(owner.id, title="plain title"))
        redis_storage.create_task(make_task(owner.id, title="100% done"))

        tasks, _ = redis_storage.list_tasks(TaskFilters(search="%"))
        assert [t.title for t in tasks] == ["100% done"]
        _, total = redis_storage.list_tasks(TaskFilters(search="plain_title"))
        assert total == 0

    def test_ping(self, fake_redis, redis_storage):
        redis_storage.ping()
        assert fake_redis.ping_calls == 1


class TestErrorWrapping:

    def test_redis_errors_become_storage_errors(self):
        client = MagicMock()
        client.hgetall.side_effect = redis.ConnectionError("connection refused")
        storage = RedisStorage(client=client)

        with pytest.raises(StorageError) as exc_info:
            storage.get_task(new_id())
        assert exc_info.value.operation == "get_task"

    def test_ping_failure(self):
        client = MagicMock()
        client.ping.side_effect = redis.TimeoutError("timed out")
        with pytest.raises(StorageError):
            RedisStorage(client=client).ping()
