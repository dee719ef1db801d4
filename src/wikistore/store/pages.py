"""Core storage operations for page records."""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..types import Page
from .schema import PageRecord, as_utc
from .serialization import deserialize_attachments, serialize_attachments

logger = logging.getLogger(__name__)


class PageTable:
    """Handles CRUD operations on the page collection.

    Bound to one open session; like BlobStore it flushes but never commits.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def all(self) -> List[Page]:
        """Return every page ordered by name."""
        records = self._session.scalars(select(PageRecord).order_by(PageRecord.name))
        return [self._record_to_page(record) for record in records]

    def find_by_id(self, page_id: int) -> Optional[Page]:
        record = self._session.get(PageRecord, page_id)
        if record is None:
            return None
        return self._record_to_page(record)

    def find_by_name(self, name: str) -> Optional[Page]:
        """Case-insensitive exact match on the page name."""
        logger.debug(f"[GET] Querying for page: {name}")
        record = self._session.scalars(
            select(PageRecord)
            .where(func.lower(PageRecord.name) == name.lower())
            .order_by(PageRecord.id)
            .limit(1)
        ).first()
        if record is None:
            return None
        return self._record_to_page(record)

    def insert(self, page: Page) -> Page:
        """Insert a page and return it with its database-assigned id.

        The ``id`` of the incoming page is ignored.
        """
        record = PageRecord(
            name=page.name,
            content=page.content,
            last_modified_utc=page.last_modified_utc,
            attachments=serialize_attachments(page.attachments),
        )
        self._session.add(record)
        self._session.flush()
        logger.debug(f"[STORE] Inserted page {record.id}: {record.name}")
        return page.model_copy(update={"id": record.id})

    def update(self, page: Page) -> bool:
        """Overwrite the stored record with the same id.

        Returns:
            True if the record existed, False otherwise
        """
        record = self._session.get(PageRecord, page.id)
        if record is None:
            logger.debug(f"[STORE] No page {page.id} to update")
            return False

        record.name = page.name
        record.content = page.content
        record.last_modified_utc = page.last_modified_utc
        record.attachments = serialize_attachments(page.attachments)
        self._session.flush()
        logger.debug(f"[STORE] Updated page {page.id}: {page.name}")
        return True

    def delete(self, page_id: int) -> bool:
        """Delete a page record.

        Returns:
            True if the record existed, False otherwise
        """
        record = self._session.get(PageRecord, page_id)
        if record is None:
            return False
        self._session.delete(record)
        self._session.flush()
        logger.debug(f"[STORE] Deleted page {page_id}")
        return True

    @staticmethod
    def _record_to_page(record: PageRecord) -> Page:
        """Convert database record back to a Page instance."""
        return Page(
            id=record.id,
            name=record.name,
            content=record.content or "",
            last_modified_utc=as_utc(record.last_modified_utc),
            attachments=deserialize_attachments(record.attachments),
        )
