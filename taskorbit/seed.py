"""
Demo data for local development.

Run with ``python -m taskorbit.seed`` or set TASKORBIT_SEED=true to seed at
startup. Seeding is idempotent: existing users (by email) and tasks (by title
and creator) are left alone.
"""
import logging
from datetime import timedelta
from typing import Any, Dict, List, Tuple

from taskorbit.auth.passwords import hash_password
from taskorbit.exceptions import UserNotFoundError
from taskorbit.models.common import utcnow
from taskorbit.models.task_models import TaskCreate, TaskFilters, TaskUpdate
from taskorbit.models.user_models import User

logger = logging.getLogger(__name__)

DEMO_USERS: List[Dict[str, str]] = [
    {"email": "admin@taskorbit.com", "password": "admin123", "name": "Admin User", "role": "admin"},
    {"email": "john@example.com", "password": "john123", "name": "John Doe", "role": "user"},
    {"email": "jane@example.com", "password": "jane123", "name": "Jane Smith", "role": "user"},
]

# creator / assignee are indexes into DEMO_USERS; due is days from now
DEMO_TASKS: List[Dict[str, Any]] = [
    {
        "title": "Setup TaskOrbit Infrastructure",
        "description": "Set up the complete TaskOrbit development environment with Docker and Kubernetes",
        "status": "in_progress", "priority": "high", "due": 7, "creator": 0, "assignee": 0,
        "tags": ["infrastructure", "devops"], "estimated_hours": 8.0,
    },
    {
        "title": "Implement User Authentication",
        "description": "Create secure JWT-based authentication system with user registration and login",
        "status": "completed", "priority": "medium", "due": -2, "creator": 0, "assignee": 1,
        "tags": ["authentication", "security"], "estimated_hours": 6.0, "actual_hours": 5.5,
    },
    {
        "title": "Create Task Management API",
        "description": "Build RESTful API endpoints for task CRUD operations with proper validation",
        "status": "pending", "priority": "high", "due": 3, "creator": 0, "assignee": 2,
        "tags": ["api", "backend"], "estimated_hours": 10.0,
    },
    {
        "title": "Design Frontend Dashboard",
        "description": "Create responsive dashboard with task management interface",
        "status": "pending", "priority": "medium", "due": 5, "creator": 1, "assignee": 1,
        "tags": ["frontend", "ui"], "estimated_hours": 12.0,
    },
    {
        "title": "Setup Monitoring and Logging",
        "description": "Implement Prometheus metrics and Grafana dashboards for system monitoring",
        "status": "pending", "priority": "low", "due": 10, "creator": 0, "assignee": 2,
        "tags": ["monitoring", "devops"], "estimated_hours": 4.0,
    },
]


def _ensure_user(services, entry: Dict[str, str]) -> Tuple[User, bool]:
    try:
        user = services.user_service.get_user_by_email(entry["email"])
        logger.info(f"User already exists: {user.email}")
        return user, False
    except UserNotFoundError:
        pass
    user = services.user_service.create_user(
        email=entry["email"],
        password_hash=hash_password(entry["password"], rounds=services.settings.bcrypt_rounds),
        name=entry["name"],
        role=entry["role"],
    )
    logger.info(f"Created demo user {user.email}")
    return user, True


def _task_exists(services, title: str, creator: User) -> bool:
    tasks, _ = services.task_service.list_tasks(TaskFilters(search=title), page=1, limit=100)
    return any(task.title == title and task.created_by == creator.id for task in tasks)


def seed_demo_data(services) -> Dict[str, int]:
    """
    Create the demo users and tasks that do not exist yet.

    Args:
        services: ServiceContainer to seed through

    Returns:
        Counts of users and tasks created by this run
    """
    created = {"users": 0, "tasks": 0}
    users = []
    for entry in DEMO_USERS:
        user, is_new = _ensure_user(services, entry)
        users.append(user)
        created["users"] += int(is_new)

    now = utcnow()
    for entry in DEMO_TASKS:
        creator = users[entry["creator"]]
        if _task_exists(services, entry["title"], creator):
            logger.info(f"Task already exists: {entry['title']}")
            continue
        task = services.task_service.create_task(
            TaskCreate(
                title=entry["title"],
                description=entry["description"],
                status=entry["status"],
                priority=entry["priority"],
                due_date=now + timedelta(days=entry["due"]),
                assignee_id=users[entry["assignee"]].id,
                tags=entry["tags"],
                estimated_hours=entry["estimated_hours"],
            ),
            creator,
        )
        if "actual_hours" in entry:
            services.task_service.update_task(task.id, TaskUpdate(actual_hours=entry["actual_hours"]), creator)
        created["tasks"] += 1
        logger.info(f"Created demo task: {task.title}")

    logger.info(f"Seeding complete: {created['users']} user(s), {created['tasks']} task(s) created")
    return created


def main():
    from taskorbit.config import get_settings
    from taskorbit.dependencies.services import get_services
    from taskorbit.middleware.logging_setup import setup_logging

    setup_logging(get_settings().log_level)
    seed_demo_data(get_services())


if __name__ == "__main__":
    main()
