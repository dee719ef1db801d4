"""Blob storage for page attachments, living in the same database as the pages."""

import logging
import mimetypes
from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..types import FileInfo
from .exceptions import BlobNotFoundError
from .schema import BlobChunk, BlobFile, as_utc, utcnow

logger = logging.getLogger(__name__)

# Same chunk size the embedded file storage used
CHUNK_SIZE = 255 * 1024
DEFAULT_MIME_TYPE = "application/octet-stream"


def make_file_id() -> str:
    return uuid4().hex


def guess_mime_type(filename: str) -> str:
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type or DEFAULT_MIME_TYPE


class BlobStore:
    """Stores, finds and deletes binary payloads keyed by a generated id.

    A BlobStore is bound to one open session and never commits; the caller
    decides where the transaction ends.
    """

    def __init__(
        self,
        session: Session,
        chunk_size: int = CHUNK_SIZE,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._session = session
        self._chunk_size = chunk_size
        self._clock = clock

    def upload(
        self,
        filename: str,
        data: bytes,
        mime_type: Optional[str] = None,
        file_id: Optional[str] = None,
    ) -> FileInfo:
        """Store ``data`` and return the metadata of the new blob.

        Args:
            filename: Declared file name
            data: File content
            mime_type: Content type, guessed from ``filename`` when omitted
            file_id: Id to store under, generated when omitted

        Returns:
            Metadata of the stored blob
        """
        file_id = file_id or make_file_id()
        chunks = [
            data[offset : offset + self._chunk_size]
            for offset in range(0, len(data), self._chunk_size)
        ]

        blob = BlobFile(
            id=file_id,
            filename=filename,
            mime_type=mime_type or guess_mime_type(filename),
            length=len(data),
            chunk_count=len(chunks),
            uploaded_at=self._clock(),
        )
        self._session.add(blob)
        # Chunks reference the file row, so it must exist first
        self._session.flush()
        for sequence, chunk in enumerate(chunks):
            self._session.add(BlobChunk(file_id=file_id, sequence=sequence, data=chunk))
        self._session.flush()

        logger.debug(f"[BLOB] Uploaded {file_id} ({filename}, {len(data)} bytes)")
        return self._to_info(blob)

    def find_by_id(self, file_id: str) -> Optional[FileInfo]:
        """Return blob metadata, or None if no blob has this id."""
        blob = self._session.get(BlobFile, file_id)
        if blob is None:
            return None
        return self._to_info(blob)

    def download(self, file_id: str) -> bytes:
        """Read the full content of a blob into memory.

        Raises:
            BlobNotFoundError: If no blob has this id
        """
        if self._session.get(BlobFile, file_id) is None:
            raise BlobNotFoundError(file_id)

        chunks = self._session.scalars(
            select(BlobChunk.data)
            .where(BlobChunk.file_id == file_id)
            .order_by(BlobChunk.sequence)
        )
        return b"".join(chunks)

    def delete(self, file_id: str) -> bool:
        """Delete a blob and its chunks.

        Returns:
            True if the blob existed, False otherwise
        """
        blob = self._session.get(BlobFile, file_id)
        if blob is None:
            logger.debug(f"[BLOB] Nothing to delete for {file_id}")
            return False

        self._session.execute(delete(BlobChunk).where(BlobChunk.file_id == file_id))
        self._session.delete(blob)
        self._session.flush()
        logger.debug(f"[BLOB] Deleted {file_id}")
        return True

    @staticmethod
    def _to_info(blob: BlobFile) -> FileInfo:
        return FileInfo(
            id=blob.id,
            filename=blob.filename,
            mime_type=blob.mime_type,
            length=blob.length,
            chunk_count=blob.chunk_count,
            uploaded_at=as_utc(blob.uploaded_at),
        )
