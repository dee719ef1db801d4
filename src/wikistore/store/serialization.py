"""Serialization utilities for converting models to/from database storage."""

from typing import Any, List, Optional

from pydantic import BaseModel

from ..types import Attachment


def serialize_for_storage(value: Any) -> Any:
    """Convert complex objects to JSON-serializable formats for database storage.

    Handles:
    - Pydantic models → JSON-serialized dictionaries
    - Lists and dicts recursively

    Args:
        value: The value to serialize

    Returns:
        JSON-serializable representation of the value
    """
    if isinstance(value, BaseModel):
        # Use mode='json' to handle datetime serialization automatically
        return value.model_dump(mode="json")
    elif isinstance(value, list):
        return [serialize_for_storage(item) for item in value]
    elif isinstance(value, dict):
        return {k: serialize_for_storage(v) for k, v in value.items()}
    else:
        return value


def serialize_attachments(attachments: List[Attachment]) -> List[dict[str, Any]]:
    return [serialize_for_storage(attachment) for attachment in attachments]


def deserialize_attachments(value: Optional[List[Any]]) -> List[Attachment]:
    """Turn the stored JSON list back into Attachment models.

    Entries that are already Attachment instances are kept as-is.
    """
    if not value:
        return []
    return [
        item if isinstance(item, Attachment) else Attachment.model_validate(item)
        for item in value
    ]
