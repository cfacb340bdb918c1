"""
SQLite implementation of the storage interface.

Each record is one row; task ownership columns are foreign keys into users.
"""
import json
import logging
import os
import sqlite3
import time
from typing import Any, Dict, List, Optional, Tuple

from taskorbit.models.common import ensure_utc
from taskorbit.models.task_models import (
    Task,
    TaskFilters,
    VALID_PRIORITIES,
    VALID_STATUSES,
)
from taskorbit.models.user_models import User, VALID_ROLES
from taskorbit.storage.interface import StorageError, StorageInterface

logger = logging.getLogger(__name__)

# Queries slower than this (seconds) are logged at WARNING
QUERY_SLOW_THRESHOLD = float(os.getenv("DB_QUERY_SLOW_THRESHOLD", "0.1"))

USER_COLUMNS = ["id", "email", "password_hash", "name", "role", "is_active", "created_at", "updated_at"]
TASK_COLUMNS = [
    "id", "title", "description", "status", "priority", "due_date", "completed_at",
    "created_by", "assignee_id", "tags", "estimated_hours", "actual_hours",
    "created_at", "updated_at",
]


def _in_list(values: List[str]) -> str:
    return ", ".join(f"'{v}'" for v in values)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term is matched as a plain substring."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLiteStorage(StorageInterface):
    """SQLite-based storage implementation."""

    def __init__(self, db_path: str):
        """
        Initialize storage and create the schema if needed.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path
        self._ensure_db_directory()
        self._init_schema()

    @property
    def backend_name(self) -> str:
        return "sqlite"

    def _ensure_db_directory(self):
        """Ensure database directory exists."""
        db_dir = os.path.dirname(os.path.abspath(self.db_path))
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _execute_with_logging(self, cursor, query: str, params: Tuple = ()):
        """Execute a query and log its duration."""
        start_time = time.time()
        cursor.execute(query, params)
        duration = time.time() - start_time
        log_level = logging.WARNING if duration >= QUERY_SLOW_THRESHOLD else logging.DEBUG
        logger.log(log_level, f"Query executed in {duration:.4f}s: {' '.join(query.split())[:200]}")
        return cursor

    def _run(self, operation: str, query: str, params: Tuple = (), fetch: Optional[str] = None):
        """
        Run a single statement on a fresh connection.

        Args:
            operation: Name used in logs and errors
            query: SQL statement
            params: Statement parameters
            fetch: None, "one" or "all"

        Raises:
            StorageError: If SQLite reports any error
        """
        try:
            conn = self._get_connection()
        except sqlite3.Error as e:
            logger.error(f"Failed to open database {self.db_path}: {e}", exc_info=True)
            raise StorageError(f"Failed to open database: {e}", operation=operation) from e
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, query, params)
            if fetch == "one":
                result = cursor.fetchone()
            elif fetch == "all":
                result = cursor.fetchall()
            else:
                result = cursor.rowcount
            conn.commit()
            return result
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Database error during {operation}: {e}", exc_info=True)
            raise StorageError(f"Database error during {operation}: {e}", operation=operation) from e
        finally:
            conn.close()

    def _init_schema(self):
        """Initialize database schema."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, f"""
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE COLLATE NOCASE,
                    password_hash TEXT NOT NULL,
                    name TEXT NOT NULL,
                    role TEXT NOT NULL DEFAULT 'user' CHECK(role IN ({_in_list(VALID_ROLES)})),
                    is_active INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            self._execute_with_logging(cursor, f"""
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL CHECK(length(title) > 0),
                    description TEXT,
                    status TEXT NOT NULL DEFAULT 'pending'
                        CHECK(status IN ({_in_list(VALID_STATUSES)})),
                    priority TEXT NOT NULL DEFAULT 'medium'
                        CHECK(priority IN ({_in_list(VALID_PRIORITIES)})),
                    due_date TEXT,
                    completed_at TEXT,
                    created_by TEXT NOT NULL,
                    assignee_id TEXT,
                    tags TEXT NOT NULL DEFAULT '[]',
                    estimated_hours REAL CHECK(estimated_hours IS NULL OR estimated_hours >= 0),
                    actual_hours REAL CHECK(actual_hours IS NULL OR actual_hours >= 0),
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    CHECK((status = 'completed') = (completed_at IS NOT NULL)),
                    FOREIGN KEY (created_by) REFERENCES users(id) ON DELETE CASCADE,
                    FOREIGN KEY (assignee_id) REFERENCES users(id) ON DELETE SET NULL
                )
            """)
            self._execute_with_logging(cursor, "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status)")
            self._execute_with_logging(cursor, "CREATE INDEX IF NOT EXISTS idx_tasks_assignee ON tasks(assignee_id)")
            self._execute_with_logging(cursor, "CREATE INDEX IF NOT EXISTS idx_tasks_created_at ON tasks(created_at)")
            conn.commit()
        finally:
            conn.close()

    # Row mapping

    @staticmethod
    def _format_datetime(value) -> Optional[str]:
        # Fixed-width text so lexical order in SQL matches time order
        value = ensure_utc(value)
        return value.isoformat(timespec="microseconds") if value is not None else None

    def _user_params(self, user: User) -> Tuple:
        return (
            user.id,
            user.email.lower(),
            user.password_hash,
            user.name,
            user.role,
            1 if user.is_active else 0,
            self._format_datetime(user.created_at),
            self._format_datetime(user.updated_at),
        )

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        data: Dict[str, Any] = dict(row)
        data["is_active"] = bool(data["is_active"])
        return User.model_validate(data)

    def _task_params(self, task: Task) -> Tuple:
        return (
            task.id,
            task.title,
            task.description,
            task.status,
            task.priority,
            self._format_datetime(task.due_date),
            self._format_datetime(task.completed_at),
            task.created_by,
            task.assignee_id,
            json.dumps(task.tags),
            task.estimated_hours,
            task.actual_hours,
            self._format_datetime(task.created_at),
            self._format_datetime(task.updated_at),
        )

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        data: Dict[str, Any] = dict(row)
        data["tags"] = json.loads(data["tags"]) if data.get("tags") else []
        return Task.model_validate(data)

    # User operations

    def create_user(self, user: User) -> User:
        placeholders = ", ".join("?" for _ in USER_COLUMNS)
        self._run(
            "create_user",
            f"INSERT INTO users ({', '.join(USER_COLUMNS)}) VALUES ({placeholders})",
            self._user_params(user),
        )
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        row = self._run("get_user", "SELECT * FROM users WHERE id = ?", (user_id,), fetch="one")
        return self._row_to_user(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        row = self._run(
            "get_user_by_email", "SELECT * FROM users WHERE email = ?", (email.lower(),), fetch="one"
        )
        return self._row_to_user(row) if row else None

    def update_user(self, user: User) -> User:
        assignments = ", ".join(f"{column} = ?" for column in USER_COLUMNS[1:])
        params = self._user_params(user)
        self._run("update_user", f"UPDATE users SET {assignments} WHERE id = ?", params[1:] + (user.id,))
        return user

    def delete_user(self, user_id: str) -> None:
        self._run("delete_user", "DELETE FROM users WHERE id = ?", (user_id,))

    def list_users(self) -> List[User]:
        rows = self._run("list_users", "SELECT * FROM users ORDER BY created_at DESC", fetch="all")
        return [self._row_to_user(row) for row in rows]

    # Task operations

    def create_task(self, task: Task) -> Task:
        placeholders = ", ".join("?" for _ in TASK_COLUMNS)
        self._run(
            "create_task",
            f"INSERT INTO tasks ({', '.join(TASK_COLUMNS)}) VALUES ({placeholders})",
            self._task_params(task),
        )
        return task

    def get_task(self, task_id: str) -> Optional[Task]:
        row = self._run("get_task", "SELECT * FROM tasks WHERE id = ?", (task_id,), fetch="one")
        return self._row_to_task(row) if row else None

    def update_task(self, task: Task) -> Task:
        assignments = ", ".join(f"{column} = ?" for column in TASK_COLUMNS[1:])
        params = self._task_params(task)
        self._run("update_task", f"UPDATE tasks SET {assignments} WHERE id = ?", params[1:] + (task.id,))
        return task

    def delete_task(self, task_id: str) -> None:
        self._run("delete_task", "DELETE FROM tasks WHERE id = ?", (task_id,))

    def _build_where(self, filters: Optional[TaskFilters]) -> Tuple[str, List[Any]]:
        conditions: List[str] = []
        params: List[Any] = []
        if filters is None:
            return "", params

        if filters.status:
            conditions.append("status = ?")
            params.append(filters.status)
        if filters.priority:
            conditions.append("priority = ?")
            params.append(filters.priority)
        if filters.assignee_id:
            conditions.append("assignee_id = ?")
            params.append(filters.assignee_id)
        if filters.search:
            # LIKE is case-insensitive for ASCII in SQLite; wildcards in the term match literally
            conditions.append("(title LIKE ? ESCAPE '\\' OR COALESCE(description, '') LIKE ? ESCAPE '\\')")
            pattern = f"%{escape_like(filters.search)}%"
            params.extend([pattern, pattern])
        if filters.due_date_from:
            conditions.append("due_date IS NOT NULL AND due_date >= ?")
            params.append(self._format_datetime(filters.due_date_from))
        if filters.due_date_to:
            conditions.append("due_date IS NOT NULL AND due_date <= ?")
            params.append(self._format_datetime(filters.due_date_to))

        if not conditions:
            return "", params
        return " WHERE " + " AND ".join(conditions), params

    def list_tasks(
        self,
        filters: Optional[TaskFilters] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[Task], int]:
        where, params = self._build_where(filters)
        count_row = self._run("count_tasks", f"SELECT COUNT(*) FROM tasks{where}", tuple(params), fetch="one")
        total = count_row[0] if count_row else 0

        query = f"SELECT * FROM tasks{where} ORDER BY created_at DESC"
        page_params = list(params)
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            page_params.extend([limit, offset])
        elif offset:
            query += " LIMIT -1 OFFSET ?"
            page_params.append(offset)
        rows = self._run("list_tasks", query, tuple(page_params), fetch="all")
        return [self._row_to_task(row) for row in rows], total

    def ping(self) -> None:
        self._run("ping", "SELECT 1", fetch="one")
