"""SQLAlchemy tables backing the page collection and the blob storage."""

from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy import (
    JSON,
    TIMESTAMP,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# SQLAlchemy declarative base for table definitions
class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to timestamps read back from backends that drop the zone."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class PageRecord(Base):
    """One wiki page. Attachments live inline as a JSON list."""

    __tablename__ = "pages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Canonical form; usually lowercase, but the sanitizer may decode entities
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    last_modified_utc: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow
    )

    # List of serialized Attachment dicts
    attachments: Mapped[List[Any]] = mapped_column(JSON, nullable=False, default=list)


# Names are unique regardless of case
Index("idx_pages_name", func.lower(PageRecord.name), unique=True)


class BlobFile(Base):
    """Metadata of a stored blob. The bytes live in BlobChunk rows."""

    __tablename__ = "blob_files"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    length: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    chunk_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    uploaded_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=utcnow
    )


class BlobChunk(Base):
    """A slice of a blob's content, ordered by ``sequence``."""

    __tablename__ = "blob_chunks"

    file_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("blob_files.id"), primary_key=True
    )
    sequence: Mapped[int] = mapped_column(Integer, primary_key=True)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
