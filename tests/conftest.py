"""
Shared fixtures.
"""
import os
import shutil
import tempfile

import pytest

from fakes import FakeRedis
from taskorbit.config import Settings
from taskorbit.dependencies.services import ServiceContainer
from taskorbit.storage.redis_storage import RedisStorage
from taskorbit.storage.sqlite_storage import SQLiteStorage


@pytest.fixture
def temp_db_path():
    """Path to a throwaway SQLite file, removed after the test."""
    temp_dir = tempfile.mkdtemp()
    yield os.path.join(temp_dir, "test_taskorbit.db")
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def settings(temp_db_path):
    """Settings tuned for fast tests (cheap bcrypt, fixed secret)."""
    return Settings(
        environment="test",
        storage_backend="sqlite",
        db_path=temp_db_path,
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        seed_on_startup=False,
    )


@pytest.fixture(params=["sqlite", "redis"])
def storage(request, temp_db_path):
    """Both backends sit behind the same port, so service and API tests run against each."""
    if request.param == "redis":
        return RedisStorage(client=FakeRedis())
    return SQLiteStorage(temp_db_path)


@pytest.fixture
def services(settings, storage):
    return ServiceContainer(settings=settings, storage=storage)
