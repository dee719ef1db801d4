"""Tests for attachment serialization."""

from datetime import datetime, timezone

from wikistore.store.serialization import (
    deserialize_attachments,
    serialize_attachments,
    serialize_for_storage,
)
from wikistore.types import Attachment

UPLOADED = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def make_attachment(file_id: str = "abc123") -> Attachment:
    return Attachment(
        file_id=file_id,
        file_name="diagram.png",
        mime_type="image/png",
        last_modified_utc=UPLOADED,
    )


def test_serialize_attachment_is_json_friendly() -> None:
    stored = serialize_attachments([make_attachment()])
    assert stored == [
        {
            "file_id": "abc123",
            "file_name": "diagram.png",
            "mime_type": "image/png",
            "last_modified_utc": "2024-05-01T09:30:00Z",
        }
    ]


def test_serialize_nested_structures() -> None:
    value = {"items": [make_attachment("a")], "count": 1}
    stored = serialize_for_storage(value)
    assert stored["count"] == 1
    assert stored["items"][0]["file_id"] == "a"


def test_deserialize_restores_models() -> None:
    attachments = [make_attachment("a"), make_attachment("b")]
    restored = deserialize_attachments(serialize_attachments(attachments))
    assert restored == attachments


def test_deserialize_empty_values() -> None:
    assert deserialize_attachments(None) == []
    assert deserialize_attachments([]) == []


def test_deserialize_keeps_models() -> None:
    attachment = make_attachment()
    assert deserialize_attachments([attachment])[0] is attachment
