from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Attachment(BaseModel):
    """A file attached to a page. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    file_id: str = Field(description="Id of the blob holding the file content")
    file_name: str = Field(description="File name as uploaded")
    mime_type: str = Field(description="Content type of the file")
    last_modified_utc: datetime = Field(description="Upload timestamp")

    @property
    def is_image(self) -> bool:
        """Whether the attachment can be shown inline instead of as a link."""
        return self.mime_type.startswith("image/")


class Page(BaseModel):
    """A named wiki document with its attachments."""

    id: int = Field(description="Database assigned identifier")
    name: str = Field(description="Canonical (normalized) page name")
    content: str = Field(default="", description="Markdown source of the page")
    last_modified_utc: datetime = Field(description="Set by the store on every write")
    attachments: List[Attachment] = Field(default_factory=list)

    def find_attachment(self, file_id: str) -> Optional[Attachment]:
        for attachment in self.attachments:
            if attachment.file_id.lower() == file_id.lower():
                return attachment
        return None


class UploadedFile(BaseModel):
    """Bytes of a new attachment travelling with a page save."""

    filename: str
    data: bytes
    mime_type: Optional[str] = None

    def __repr__(self) -> str:
        return f"UploadedFile(filename={self.filename!r}, size={len(self.data)})"


class PageInput(BaseModel):
    """What a caller submits to create or update a page."""

    id: Optional[int] = Field(None, description="Existing page id, None to insert")
    name: str = Field(description="Page name before normalization")
    content: str = Field(default="")
    attachment: Optional[UploadedFile] = Field(
        None, description="Optional file to attach to the page"
    )


class FileInfo(BaseModel):
    """Metadata of a stored blob, returned separately from its bytes."""

    id: str
    filename: str
    mime_type: str
    length: int
    chunk_count: int
    uploaded_at: datetime
