"""
Helpers shared by the record and request models.
"""
import uuid
from datetime import datetime, UTC
from typing import Optional


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to UTC. Naive values are taken to already be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def new_id() -> str:
    """Generate an opaque record identifier."""
    return str(uuid.uuid4())


def validate_uuid(value: Optional[str], field_name: str) -> Optional[str]:
    """Validate that value is a UUID string and return it in canonical form."""
    if value is None:
        return value
    try:
        return str(uuid.UUID(str(value)))
    except ValueError:
        raise ValueError(f"{field_name} must be a valid UUID")
