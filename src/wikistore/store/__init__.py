"""SQL-backed storage for wiki pages and their attachments.

This package provides a PageStore facade over a page table, a blob store
living in the same database, and a time-bounded cache of the page listing.
"""

from .blobs import BlobStore
from .cache import Cache, MemoryCache
from .connection import ConnectionFactory
from .core import ALL_PAGES_KEY, PageStore
from .exceptions import BlobNotFoundError, StoreError
from .pages import PageTable

__all__ = [
    "ALL_PAGES_KEY",
    "BlobNotFoundError",
    "BlobStore",
    "Cache",
    "ConnectionFactory",
    "MemoryCache",
    "PageStore",
    "PageTable",
    "StoreError",
]
