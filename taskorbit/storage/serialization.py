"""
Conversion between records and flat Redis hashes.

Strings are stored verbatim and datetimes as ISO 8601. Every other value is
JSON encoded. None fields are left out of the hash entirely.
"""
import json
import typing
from datetime import datetime
from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel

from taskorbit.models.common import ensure_utc

ModelT = TypeVar("ModelT", bound=BaseModel)


def _base_type(annotation: Any) -> Any:
    """Strip Optional[...] from an annotation."""
    args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
    if typing.get_origin(annotation) is typing.Union and len(args) == 1:
        return args[0]
    return annotation


def encode_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):
        return ensure_utc(value).isoformat()
    return json.dumps(value)


def to_hash(record: BaseModel) -> Dict[str, str]:
    """Flatten a record into a mapping suitable for HSET."""
    mapping: Dict[str, str] = {}
    for name in type(record).model_fields:
        value = getattr(record, name)
        if value is None:
            continue
        mapping[name] = encode_value(value)
    return mapping


def null_fields(record: BaseModel) -> typing.List[str]:
    """Names of fields that are None and must be removed from a stored hash."""
    return [name for name in type(record).model_fields if getattr(record, name) is None]


def from_hash(model: Type[ModelT], data: Dict[str, str]) -> ModelT:
    """Rebuild a record from an HGETALL result."""
    values: Dict[str, Any] = {}
    for name, field in model.model_fields.items():
        if name not in data:
            continue
        raw = data[name]
        base = _base_type(field.annotation)
        if base in (str, datetime):
            values[name] = raw
        else:
            values[name] = json.loads(raw)
    return model.model_validate(values)
