"""
Task-related API routes.
Thin HTTP layer that delegates to service layer.
"""
import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from taskorbit.adapters.http_framework import HTTPFrameworkAdapter
from taskorbit.api.response_strategy import response_context
from taskorbit.auth.dependencies import get_current_user
from taskorbit.dependencies.services import get_task_service
from taskorbit.models.task_models import Priority, TaskAssign, TaskCreate, TaskFilters, TaskStatus, TaskUpdate
from taskorbit.models.user_models import User
from taskorbit.services.task_service import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, TaskService

logger = logging.getLogger(__name__)

# Initialize adapter
http_adapter = HTTPFrameworkAdapter()
Depends = http_adapter.Depends
Query = http_adapter.Query

router = http_adapter.create_router(prefix="/tasks", tags=["tasks"])


@router.post("", status_code=201)
async def create_task(
    task: TaskCreate,
    user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    """Create a new task."""
    created = task_service.create_task(task, user)
    return response_context.render_created(created, "Task created successfully")


@router.get("")
async def list_tasks(
    page: int = Query(DEFAULT_PAGE, ge=1, description="Page number (1-based)"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Page size"),
    status: Optional[TaskStatus] = Query(None, description="Filter by status"),
    priority: Optional[Priority] = Query(None, description="Filter by priority"),
    assignee_id: Optional[UUID] = Query(None, description="Filter by assignee"),
    search: Optional[str] = Query(None, description="Case-insensitive search in title and description"),
    due_date_from: Optional[datetime] = Query(None, description="Due on or after (ISO 8601)"),
    due_date_to: Optional[datetime] = Query(None, description="Due on or before (ISO 8601)"),
    user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    """List tasks newest first with filters and pagination."""
    filters = TaskFilters(
        status=status.value if status else None,
        priority=priority.value if priority else None,
        assignee_id=str(assignee_id) if assignee_id else None,
        search=search.strip() if search and search.strip() else None,
        due_date_from=due_date_from,
        due_date_to=due_date_to,
    )
    tasks, pagination = task_service.list_tasks(filters, page=page, limit=limit)
    return response_context.render_success(
        {"tasks": tasks, "pagination": pagination},
        "Tasks retrieved successfully",
    )


@router.get("/stats")
async def get_task_stats(
    user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    """Task statistics for the calling user."""
    stats = task_service.get_task_stats(user)
    return response_context.render_success(stats, "Task statistics retrieved successfully")


@router.get("/{task_id}")
async def get_task(
    task_id: UUID,
    user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    """Get a task by ID."""
    task = task_service.get_task(str(task_id))
    return response_context.render_success(task, "Task retrieved successfully")


@router.put("/{task_id}")
async def update_task(
    task_id: UUID,
    update: TaskUpdate,
    user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    """Partially update a task. Only fields present in the body change."""
    task = task_service.update_task(str(task_id), update, user)
    return response_context.render_success(task, "Task updated successfully")


@router.put("/{task_id}/assign")
async def assign_task(
    task_id: UUID,
    assignment: TaskAssign,
    user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    """Assign a task to a user."""
    task = task_service.assign_task(str(task_id), assignment.assignee_id, user)
    return response_context.render_success(task, "Task assigned successfully")


@router.delete("/{task_id}")
async def delete_task(
    task_id: UUID,
    user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    """Delete a task."""
    task_service.delete_task(str(task_id), user)
    return response_context.render_success(None, "Task deleted successfully")
