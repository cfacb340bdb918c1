"""
Redis implementation of the storage interface.

Key layout:
    user:{id}            hash of user fields
    users                set of user ids
    user_email:{email}   user id for a lower-cased email
    task:{id}            hash of task fields
    tasks                set of task ids

Updates are not transactional; concurrent writers to the same task resolve
as last writer wins.
"""
import logging
from typing import List, Optional, Tuple

import redis

from taskorbit.models.task_models import Task, TaskFilters
from taskorbit.models.user_models import User
from taskorbit.storage.interface import StorageError, StorageInterface
from taskorbit.storage.serialization import from_hash, null_fields, to_hash

logger = logging.getLogger(__name__)

USERS_SET = "users"
TASKS_SET = "tasks"


def user_key(user_id: str) -> str:
    return f"user:{user_id}"


def user_email_key(email: str) -> str:
    return f"user_email:{email.lower()}"


def task_key(task_id: str) -> str:
    return f"task:{task_id}"


class RedisStorage(StorageInterface):
    """Redis-based storage implementation."""

    def __init__(self, redis_url: Optional[str] = None, client=None):
        """
        Initialize storage.

        Args:
            redis_url: Connection URL, used when no client is given
            client: Pre-built redis client (decode_responses must be enabled)
        """
        if client is None:
            if not redis_url:
                raise ValueError("redis_url or client is required")
            client = redis.Redis.from_url(redis_url, decode_responses=True)
        self.redis = client

    @property
    def backend_name(self) -> str:
        return "redis"

    def _call(self, operation: str, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except redis.RedisError as e:
            logger.error(f"Redis error during {operation}: {e}", exc_info=True)
            raise StorageError(f"Redis error during {operation}: {e}", operation=operation) from e

    # User operations

    def create_user(self, user: User) -> User:
        self._call("create_user", self.redis.hset, user_key(user.id), mapping=to_hash(user))
        self._call("create_user", self.redis.sadd, USERS_SET, user.id)
        self._call("create_user", self.redis.set, user_email_key(user.email), user.id)
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        data = self._call("get_user", self.redis.hgetall, user_key(user_id))
        if not data:
            return None
        return from_hash(User, data)

    def get_user_by_email(self, email: str) -> Optional[User]:
        user_id = self._call("get_user_by_email", self.redis.get, user_email_key(email))
        if not user_id:
            return None
        return self.get_user(user_id)

    def update_user(self, user: User) -> User:
        previous = self.get_user(user.id)
        if previous is not None and previous.email.lower() != user.email.lower():
            self._call("update_user", self.redis.delete, user_email_key(previous.email))
        self._call("update_user", self.redis.hset, user_key(user.id), mapping=to_hash(user))
        self._call("update_user", self.redis.set, user_email_key(user.email), user.id)
        return user

    def delete_user(self, user_id: str) -> None:
        user = self.get_user(user_id)
        if user is None:
            return
        self._call("delete_user", self.redis.delete, user_key(user_id), user_email_key(user.email))
        self._call("delete_user", self.redis.srem, USERS_SET, user_id)

        # Mirror the relational cascade: owned tasks go, assignments are cleared
        for task in self._all_tasks():
            if task.created_by == user_id:
                self.delete_task(task.id)
            elif task.assignee_id == user_id:
                task.assignee_id = None
                self.update_task(task)

    def list_users(self) -> List[User]:
        ids = self._call("list_users", self.redis.smembers, USERS_SET)
        users = [user for user in (self.get_user(user_id) for user_id in ids) if user is not None]
        users.sort(key=lambda u: u.created_at, reverse=True)
        return users

    # Task operations

    def create_task(self, task: Task) -> Task:
        self._call("create_task", self.redis.hset, task_key(task.id), mapping=to_hash(task))
        self._call("create_task", self.redis.sadd, TASKS_SET, task.id)
        return task

    def get_task(self, task_id: str) -> Optional[Task]:
        data = self._call("get_task", self.redis.hgetall, task_key(task_id))
        if not data:
            return None
        return from_hash(Task, data)

    def update_task(self, task: Task) -> Task:
        cleared = null_fields(task)
        if cleared:
            self._call("update_task", self.redis.hdel, task_key(task.id), *cleared)
        self._call("update_task", self.redis.hset, task_key(task.id), mapping=to_hash(task))
        return task

    def delete_task(self, task_id: str) -> None:
        self._call("delete_task", self.redis.delete, task_key(task_id))
        self._call("delete_task", self.redis.srem, TASKS_SET, task_id)

    def _all_tasks(self) -> List[Task]:
        ids = self._call("list_tasks", self.redis.smembers, TASKS_SET)
        return [task for task in (self.get_task(task_id) for task_id in ids) if task is not None]

    def list_tasks(
        self,
        filters: Optional[TaskFilters] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[Task], int]:
        tasks = self._all_tasks()
        if filters is not None:
            tasks = [task for task in tasks if filters.matches(task)]
        tasks.sort(key=lambda t: t.created_at, reverse=True)
        total = len(tasks)
        end = offset + limit if limit is not None else None
        return tasks[offset:end], total

    def ping(self) -> None:
        self._call("ping", self.redis.ping)
