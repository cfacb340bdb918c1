"""
Task service - business logic for task operations.
This layer contains no HTTP framework dependencies.
Handles ownership checks, the completion timestamp and status change events.
"""
import logging
import math
from typing import Any, Dict, List, Optional, Tuple, Union

from taskorbit.exceptions import (
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    TaskNotFoundError,
    ValidationError,
)
from taskorbit.models.common import new_id, utcnow
from taskorbit.models.task_models import (
    Priority,
    Task,
    TaskCreate,
    TaskFilters,
    TaskStatus,
    TaskUpdate,
    VALID_PRIORITIES,
    VALID_STATUSES,
)
from taskorbit.models.user_models import User
from taskorbit.notifications.broadcaster import StatusBroadcaster, TASK_STATUS_CHANGED
from taskorbit.storage.interface import StorageError, StorageInterface

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _apply_completion(task: Task, previous_status: Optional[str] = None) -> None:
    """Keep completed_at in step with status."""
    if task.status == TaskStatus.COMPLETED.value:
        if task.completed_at is None or previous_status != TaskStatus.COMPLETED.value:
            task.completed_at = utcnow()
    else:
        task.completed_at = None


class TaskService:
    """Service for task business logic."""

    def __init__(self, storage: StorageInterface, broadcaster: Optional[StatusBroadcaster] = None):
        """Initialize task service with storage and (optional) event broadcaster."""
        self.storage = storage
        self.broadcaster = broadcaster

    def _ensure_user_exists(self, user_id: str) -> None:
        try:
            user = self.storage.get_user(user_id)
        except StorageError as e:
            logger.error(f"Failed to load assignee {user_id}: {e}", exc_info=True)
            raise DatabaseError("Failed to load assignee", operation="get_user", original_error=e)
        if user is None:
            raise NotFoundError("User", user_id, message="Assignee not found")

    def _save(self, task: Task, operation: str) -> Task:
        try:
            if operation == "create_task":
                return self.storage.create_task(task)
            return self.storage.update_task(task)
        except StorageError as e:
            logger.error(f"Failed to persist task {task.id} ({operation}): {e}", exc_info=True)
            raise DatabaseError(
                "Failed to save task. Please try again or contact support if the issue persists.",
                operation=operation,
                original_error=e,
            )

    def create_task(self, task_data: TaskCreate, user: User) -> Task:
        """
        Create a new task owned by the calling user.

        Args:
            task_data: Task creation data
            user: Authenticated user creating the task

        Returns:
            Stored task

        Raises:
            NotFoundError: If the assignee does not exist
            DatabaseError: If storage fails
        """
        assignee_id = task_data.assignee_id or user.id
        if assignee_id != user.id:
            self._ensure_user_exists(assignee_id)

        now = utcnow()
        task = Task(
            id=new_id(),
            title=task_data.title,
            description=task_data.description,
            status=task_data.status or TaskStatus.PENDING.value,
            priority=task_data.priority or Priority.MEDIUM.value,
            due_date=task_data.due_date,
            created_by=user.id,
            assignee_id=assignee_id,
            tags=task_data.tags or [],
            estimated_hours=task_data.estimated_hours,
            created_at=now,
            updated_at=now,
        )
        _apply_completion(task)
        self._save(task, "create_task")
        logger.info(f"Created task {task.id} for user {user.id}")
        return task

    def get_task(self, task_id: str) -> Task:
        """Get a task by ID, raising TaskNotFoundError if absent."""
        try:
            task = self.storage.get_task(task_id)
        except StorageError as e:
            logger.error(f"Failed to load task {task_id}: {e}", exc_info=True)
            raise DatabaseError("Failed to load task", operation="get_task", original_error=e)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def list_tasks(
        self,
        filters: Optional[TaskFilters] = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> Tuple[List[Task], Dict[str, int]]:
        """
        List tasks newest first.

        Args:
            filters: Optional filter predicates
            page: 1-based page number
            limit: Page size, at most MAX_LIMIT

        Returns:
            (tasks on the page, pagination block with page, limit, total, totalPages)
        """
        if page < 1:
            raise ValidationError("Page must be a positive integer", field="page", value=page)
        if limit < 1 or limit > MAX_LIMIT:
            raise ValidationError(f"Limit must be between 1 and {MAX_LIMIT}", field="limit", value=limit)

        try:
            tasks, total = self.storage.list_tasks(filters, offset=(page - 1) * limit, limit=limit)
        except StorageError as e:
            logger.error(f"Failed to list tasks: {e}", exc_info=True)
            raise DatabaseError("Failed to list tasks", operation="list_tasks", original_error=e)

        pagination = {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": math.ceil(total / limit) if total else 0,
        }
        return tasks, pagination

    def update_task(self, task_id: str, update: Union[TaskUpdate, Dict[str, Any]], user: User) -> Task:
        """
        Apply a partial update to a task.

        Only the creator or the assignee may update a task, and only the
        creator may reassign it. Fields not present in the update keep their
        stored values.

        Args:
            task_id: Task to update
            update: TaskUpdate (unset fields ignored) or a plain dict of fields
            user: Authenticated user performing the update

        Returns:
            Updated task

        Raises:
            TaskNotFoundError: If the task does not exist
            PermissionDeniedError: If the user may not update this task
            NotFoundError: If a new assignee does not exist
            DatabaseError: If storage fails
        """
        if isinstance(update, TaskUpdate):
            fields = update.model_dump(exclude_unset=True)
        else:
            fields = TaskUpdate.model_validate(update).model_dump(exclude_unset=True)

        task = self.get_task(task_id)
        if not task.involves(user.id):
            raise PermissionDeniedError("You can only update tasks you created or are assigned to")

        if "assignee_id" in fields and fields["assignee_id"] != task.assignee_id:
            if task.created_by != user.id:
                raise PermissionDeniedError("You can only assign tasks you created")
            if fields["assignee_id"] is not None:
                self._ensure_user_exists(fields["assignee_id"])

        previous_status = task.status
        merged = task.model_copy(update={**fields, "updated_at": utcnow()})
        _apply_completion(merged, previous_status)
        self._save(merged, "update_task")

        if merged.status != previous_status:
            logger.info(f"Task {task_id} status changed {previous_status} -> {merged.status}")
            self._publish_status_change(merged)
        return merged

    def assign_task(self, task_id: str, assignee_id: str, user: User) -> Task:
        """
        Assign a task to another user. Creator only.

        Raises:
            TaskNotFoundError: If the task does not exist
            NotFoundError: If the assignee does not exist
            PermissionDeniedError: If the caller did not create the task
        """
        task = self.get_task(task_id)
        if task.created_by != user.id:
            raise PermissionDeniedError("You can only assign tasks you created")
        self._ensure_user_exists(assignee_id)

        task.assignee_id = assignee_id
        task.updated_at = utcnow()
        self._save(task, "assign_task")
        logger.info(f"Assigned task {task_id} to user {assignee_id}")
        return task

    def delete_task(self, task_id: str, user: User) -> None:
        """
        Delete a task. Creator only.

        Raises:
            TaskNotFoundError: If the task does not exist
            PermissionDeniedError: If the caller did not create the task
            DatabaseError: If the delete itself fails
        """
        task = self.get_task(task_id)
        if task.created_by != user.id:
            raise PermissionDeniedError("You can only delete tasks you created")
        try:
            self.storage.delete_task(task_id)
        except StorageError as e:
            logger.error(f"Failed to delete task {task_id}: {e}", exc_info=True)
            raise DatabaseError("Failed to delete task", operation="delete_task", original_error=e)
        logger.info(f"Deleted task {task_id}")

    def get_task_stats(self, user: User) -> Dict[str, Any]:
        """
        Summarize tasks the user created or is assigned to.

        Returns:
            Dictionary with totalTasks, completedTasks, completionRate (percent)
            and per-status / per-priority counts
        """
        try:
            tasks, _ = self.storage.list_tasks()
        except StorageError as e:
            logger.error(f"Failed to load tasks for stats: {e}", exc_info=True)
            raise DatabaseError("Failed to compute task statistics", operation="get_task_stats", original_error=e)

        mine = [task for task in tasks if task.involves(user.id)]
        by_status = {status: 0 for status in VALID_STATUSES}
        by_priority = {priority: 0 for priority in VALID_PRIORITIES}
        for task in mine:
            by_status[task.status] += 1
            by_priority[task.priority] += 1

        total = len(mine)
        completed = by_status[TaskStatus.COMPLETED.value]
        return {
            "totalTasks": total,
            "completedTasks": completed,
            "completionRate": round(completed / total * 100, 2) if total else 0,
            "byStatus": by_status,
            "byPriority": by_priority,
        }

    def _publish_status_change(self, task: Task) -> None:
        if self.broadcaster is None:
            return
        delivered = self.broadcaster.publish(TASK_STATUS_CHANGED, task.model_dump(mode="json"))
        logger.debug(f"Status change for task {task.id} delivered to {delivered} subscriber(s)")
