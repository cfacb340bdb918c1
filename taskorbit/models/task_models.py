"""
Task record and the pydantic models for task-related requests.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from taskorbit.models.common import ensure_utc, utcnow, validate_uuid


class TaskStatus(Enum):
    """Task status enumeration."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Priority(Enum):
    """Task priority enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


VALID_STATUSES = [s.value for s in TaskStatus]
VALID_PRIORITIES = [p.value for p in Priority]

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000


def check_status(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in VALID_STATUSES:
        raise ValueError(f"Status must be one of: {', '.join(VALID_STATUSES)}")
    return v


def check_priority(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in VALID_PRIORITIES:
        raise ValueError(f"Priority must be one of: {', '.join(VALID_PRIORITIES)}")
    return v


def _clean_title(v: str) -> str:
    if v is None or not v.strip():
        raise ValueError("Title cannot be empty or contain only whitespace")
    v = v.strip()
    if len(v) > TITLE_MAX_LENGTH:
        raise ValueError(f"Task title must be between 1 and {TITLE_MAX_LENGTH} characters")
    return v


def _clean_description(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if len(v) > DESCRIPTION_MAX_LENGTH:
        raise ValueError(f"Task description must be less than {DESCRIPTION_MAX_LENGTH} characters")
    return v


def _clean_tags(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return v
    tags: List[str] = []
    for tag in v:
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


class Task(BaseModel):
    """Stored task record."""
    id: str
    title: str
    description: Optional[str] = None
    status: str = TaskStatus.PENDING.value
    priority: str = Priority.MEDIUM.value
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_by: str
    assignee_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        return check_status(v)

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: str) -> str:
        return check_priority(v)

    @field_validator("due_date", "completed_at", "created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    def involves(self, user_id: str) -> bool:
        """True when the user created the task or is assigned to it."""
        return user_id in (self.created_by, self.assignee_id)


class TaskCreate(BaseModel):
    """Request model for creating a task."""
    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(None, description="Optional description")
    status: Optional[str] = Field(None, description="pending, in_progress, completed or cancelled")
    priority: Optional[str] = Field(None, description="low, medium, high or urgent")
    due_date: Optional[datetime] = Field(None, description="Optional due date (ISO 8601)")
    assignee_id: Optional[str] = Field(None, description="User to assign; defaults to the creator")
    tags: Optional[List[str]] = Field(None, description="Free-form labels")
    estimated_hours: Optional[float] = Field(None, description="Estimated effort in hours", ge=0)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _clean_description(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        return check_status(v)

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: Optional[str]) -> Optional[str]:
        return check_priority(v)

    @field_validator("due_date")
    @classmethod
    def validate_due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        # Naive timestamps are read as UTC
        return ensure_utc(v)

    @field_validator("assignee_id")
    @classmethod
    def validate_assignee_id(cls, v: Optional[str]) -> Optional[str]:
        return validate_uuid(v, "assignee_id")

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_tags(v)


class TaskUpdate(BaseModel):
    """
    Request model for a partial task update.
    Only fields present in the request body are applied.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    assignee_id: Optional[str] = None
    tags: Optional[List[str]] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    actual_hours: Optional[float] = Field(None, ge=0)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _clean_description(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Status cannot be null")
        return check_status(v)

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Priority cannot be null")
        return check_priority(v)

    @field_validator("due_date")
    @classmethod
    def validate_due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @field_validator("assignee_id")
    @classmethod
    def validate_assignee_id(cls, v: Optional[str]) -> Optional[str]:
        return validate_uuid(v, "assignee_id")

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: Optional[List[str]]) -> List[str]:
        return _clean_tags(v) or []


class TaskAssign(BaseModel):
    """Request model for assigning a task."""
    assignee_id: str = Field(..., description="User to assign the task to")

    @field_validator("assignee_id")
    @classmethod
    def validate_assignee_id(cls, v: str) -> str:
        return validate_uuid(v, "assignee_id")


class TaskFilters(BaseModel):
    """Filter predicates applied when listing tasks."""
    status: Optional[str] = None
    priority: Optional[str] = None
    assignee_id: Optional[str] = None
    search: Optional[str] = None
    due_date_from: Optional[datetime] = None
    due_date_to: Optional[datetime] = None

    @field_validator("due_date_from", "due_date_to")
    @classmethod
    def validate_due_range(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    def matches(self, task: Task) -> bool:
        """Evaluate the filters against a single record."""
        if self.status and task.status != self.status:
            return False
        if self.priority and task.priority != self.priority:
            return False
        if self.assignee_id and task.assignee_id != self.assignee_id:
            return False
        if self.search:
            needle = self.search.lower()
            haystacks = [task.title, task.description or ""]
            if not any(needle in text.lower() for text in haystacks):
                return False
        if self.due_date_from or self.due_date_to:
            if task.due_date is None:
                return False
            if self.due_date_from and task.due_date < self.due_date_from:
                return False
            if self.due_date_to and task.due_date > self.due_date_to:
                return False
        return True
