"""PageStore: the public read/write/delete contract of the wiki storage."""

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from ..naming import (
    Sanitizer,
    names_match,
    normalize_page_name,
    sanitize_html,
    to_kebab_case,
)
from ..results import ErrorKind, StoreResult
from ..types import Attachment, FileInfo, Page, PageInput, UploadedFile
from .blobs import BlobStore
from .cache import Cache, MemoryCache
from .connection import ConnectionFactory
from .pages import PageTable
from .schema import utcnow

if TYPE_CHECKING:
    from ..config import AppConfig

logger = logging.getLogger(__name__)

ALL_PAGES_KEY = "all_pages"
DEFAULT_HOME_PAGE_NAME = "home-page"
DEFAULT_CACHE_TTL = timedelta(minutes=30)


class PageStore:
    """Pages, their attachments and a cached page listing.

    Every operation opens its own session through the connection factory and
    closes it before returning. Mutating operations never raise; they return
    a StoreResult tagged with an ErrorKind on failure.

    This design separates concerns into focused components:
    - PageTable: CRUD on page records
    - BlobStore: attachment bytes
    - Cache: the page listing, dropped on every page write

    Example:
        store = PageStore.create("sqlite:///wiki.db")
        result = store.save_page(PageInput(name="Team Notes", content="hello"))
        page = store.get_page("team-notes")
    """

    def __init__(
        self,
        connections: ConnectionFactory,
        cache: Optional[Cache] = None,
        sanitizer: Sanitizer = sanitize_html,
        home_page_name: str = DEFAULT_HOME_PAGE_NAME,
        cache_ttl: timedelta = DEFAULT_CACHE_TTL,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._connections = connections
        self._cache = cache if cache is not None else MemoryCache()
        self._sanitizer = sanitizer
        self._home_page_name = home_page_name
        self._cache_ttl = cache_ttl
        self._clock = clock

    @classmethod
    def create(
        cls, url: str, drop_previous: bool = False, **kwargs: Any
    ) -> "PageStore":
        """Build a store on top of a new ConnectionFactory for ``url``."""
        return cls(ConnectionFactory(url, drop_previous=drop_previous), **kwargs)

    @classmethod
    def from_config(cls, config: "AppConfig", **kwargs: Any) -> "PageStore":
        kwargs.setdefault("home_page_name", config.home_page_name)
        kwargs.setdefault("cache_ttl", timedelta(minutes=config.listing_cache_minutes))
        return cls.create(config.database_url, **kwargs)

    @property
    def home_page_name(self) -> str:
        return self._home_page_name

    def close(self) -> None:
        """Release the database connections held by this store."""
        self._connections.dispose()

    # Reads
    def list_all_pages(self) -> List[Page]:
        """List every page ordered by name, served from cache when fresh."""
        pages = self._cache.get(ALL_PAGES_KEY)
        if pages is not None:
            logger.debug("[LIST] Serving page listing from cache")
            return pages

        with self._connections.open() as session:
            items = PageTable(session).all()

        self._cache.set(ALL_PAGES_KEY, items, self._cache_ttl)
        logger.debug(f"[LIST] Cached {len(items)} pages for {self._cache_ttl}")
        return items

    def get_page(self, name: str) -> Optional[Page]:
        """Get a page by name (case-insensitive). None means no such page."""
        with self._connections.open() as session:
            return PageTable(session).find_by_name(name)

    def get_file(self, file_id: str) -> Optional[Tuple[FileInfo, bytes]]:
        """Return a blob's metadata and full content, or None if it does not exist."""
        with self._connections.open() as session:
            files = BlobStore(session, clock=self._clock)
            info = files.find_by_id(file_id)
            if info is None:
                return None
            return info, files.download(file_id)

    # Writes
    def save_page(self, page_input: PageInput) -> StoreResult:
        """Insert or update a page. The listing cache is dropped on success.

        A supplied id that matches no record is saved as a new page; the
        result then has ``created=True``.
        """
        name = normalize_page_name(page_input.name, self._sanitizer)
        if not name:
            logger.warning(f"Refusing to save empty page name: {page_input.name!r}")
            return StoreResult.failure(
                ErrorKind.INVALID, error=ValueError("Page name cannot be empty")
            )

        try:
            with self._connections.open() as session:
                pages = PageTable(session)
                existing = None
                if page_input.id is not None:
                    existing = pages.find_by_id(page_input.id)
                    if existing is None:
                        logger.warning(
                            f"Page id {page_input.id} does not exist, "
                            f"saving '{name}' as a new page"
                        )

                now = self._clock()
                attachments = list(existing.attachments) if existing else []
                if page_input.attachment is not None:
                    files = BlobStore(session, clock=self._clock)
                    attachments.append(
                        self._upload(files, page_input.attachment, now)
                    )

                if existing is None:
                    page = pages.insert(
                        Page(
                            id=0,
                            name=name,
                            content=page_input.content,
                            last_modified_utc=now,
                            attachments=attachments,
                        )
                    )
                    created = True
                else:
                    page = existing.model_copy(
                        update={
                            "name": name,
                            "content": page_input.content,
                            "last_modified_utc": now,
                            "attachments": attachments,
                        }
                    )
                    if not pages.update(page):
                        logger.warning(
                            f"Page id {page.id} vanished before it could be updated"
                        )
                        return StoreResult.failure(ErrorKind.NOT_FOUND)
                    created = False

                session.commit()
        except IntegrityError as e:
            logger.warning(f"Cannot save page '{name}', the name is already taken: {e}")
            return StoreResult.failure(ErrorKind.CONFLICT, error=e)
        except Exception as e:
            logger.error(f"Error saving page: {page_input.name}", exc_info=True)
            return StoreResult.failure(ErrorKind.DATABASE, error=e)

        self._invalidate_listing()
        return StoreResult.success(page, created=created)

    def ensure_page(self, title: str) -> StoreResult:
        """Create an empty page for a free-form title unless one already exists."""
        name = to_kebab_case(title)
        if not name:
            logger.warning(f"Cannot derive a page name from {title!r}")
            return StoreResult.failure(
                ErrorKind.INVALID, error=ValueError("Page name cannot be empty")
            )

        existing = self.get_page(name)
        if existing is not None:
            return StoreResult.success(existing, created=False)
        return self.save_page(PageInput(name=name, content=""))

    def delete_attachment(self, page_id: int, file_id: str) -> StoreResult:
        """Delete one attachment: first its blob, then its entry on the page.

        If the blob is gone but the page could not be updated the result is
        ``PARTIAL`` and carries the page as it should have been stored.
        """
        page: Optional[Page] = None
        blob_deleted = False
        try:
            with self._connections.open() as session:
                pages = PageTable(session)
                files = BlobStore(session, clock=self._clock)

                page = pages.find_by_id(page_id)
                if page is None:
                    logger.warning(
                        f"Delete attachment operation fails because page id {page_id} "
                        "cannot be found in the database"
                    )
                    return StoreResult.failure(ErrorKind.NOT_FOUND)

                attachment = page.find_attachment(file_id)
                if attachment is None:
                    logger.warning(f"Page id {page_id} has no attachment {file_id}")
                    return StoreResult.failure(ErrorKind.NOT_FOUND, page=page)

                file_id = attachment.file_id
                if not files.delete(file_id):
                    logger.warning(
                        f"Attachment {file_id} of page id {page_id} has no stored file"
                    )
                    return StoreResult.failure(ErrorKind.NOT_FOUND, page=page)

                session.commit()
                blob_deleted = True

                page = page.model_copy(
                    update={
                        "attachments": [
                            a
                            for a in page.attachments
                            if a.file_id.lower() != file_id.lower()
                        ]
                    }
                )
                if not pages.update(page):
                    logger.warning(
                        f"Deleted file {file_id} but updating the attachment list "
                        f"of page id {page_id} fails"
                    )
                    self._invalidate_listing()
                    return StoreResult.failure(ErrorKind.PARTIAL, page=page)
                session.commit()
        except Exception as e:
            if blob_deleted:
                logger.error(
                    f"Deleted file {file_id} but saving page id {page_id} failed",
                    exc_info=True,
                )
                self._invalidate_listing()
                return StoreResult.failure(ErrorKind.PARTIAL, page=page, error=e)
            logger.error(
                f"Error deleting attachment {file_id} of page id {page_id}",
                exc_info=True,
            )
            return StoreResult.failure(ErrorKind.DATABASE, error=e)

        # The cached listing carries full pages, attachments included
        self._invalidate_listing()
        return StoreResult.success(page)

    def delete_page(
        self, page_id: int, home_page_name: Optional[str] = None
    ) -> StoreResult:
        """Delete a page together with all of its attachment blobs.

        The blobs and the page record are removed in a single commit. The
        home page can never be deleted.
        """
        home_page_name = home_page_name or self._home_page_name
        try:
            with self._connections.open() as session:
                pages = PageTable(session)
                files = BlobStore(session, clock=self._clock)

                page = pages.find_by_id(page_id)
                if page is None:
                    logger.warning(
                        f"Delete operation fails because page id {page_id} "
                        "cannot be found in the database"
                    )
                    return StoreResult.failure(ErrorKind.NOT_FOUND)

                if names_match(page.name, home_page_name):
                    logger.warning(
                        f"Page id {page_id} is the home page and cannot be deleted"
                    )
                    return StoreResult.failure(ErrorKind.HOME_PAGE_PROTECTED, page=page)

                for attachment in page.attachments:
                    if not files.delete(attachment.file_id):
                        logger.warning(
                            f"Attachment {attachment.file_id} of page id {page_id} "
                            "had no stored file"
                        )

                if not pages.delete(page_id):
                    logger.warning(
                        f"Page id {page_id} vanished before it could be deleted"
                    )
                    return StoreResult.failure(ErrorKind.NOT_FOUND)

                session.commit()
        except Exception as e:
            logger.error(f"Error deleting page id {page_id}", exc_info=True)
            return StoreResult.failure(ErrorKind.DATABASE, error=e)

        self._invalidate_listing()
        return StoreResult.success(page)

    def _upload(
        self, files: BlobStore, upload: UploadedFile, now: datetime
    ) -> Attachment:
        logger.debug(f"[UPLOAD] Storing {upload!r}")
        info = files.upload(upload.filename, upload.data, mime_type=upload.mime_type)
        return Attachment(
            file_id=info.id,
            file_name=info.filename,
            mime_type=info.mime_type,
            last_modified_utc=now,
        )

    def _invalidate_listing(self) -> None:
        self._cache.remove(ALL_PAGES_KEY)
