"""
wikistore

Storage for a small wiki: pages, attachments and a cached page listing.
"""

from .naming import (
    kebab_to_title,
    normalize_page_name,
    sanitize_html,
    to_kebab_case,
)
from .results import ErrorKind, StoreResult
from .store import BlobNotFoundError, MemoryCache, PageStore, StoreError
from .types import Attachment, FileInfo, Page, PageInput, UploadedFile
from .validation import validate_page_input

__version__ = "0.1.0"

__all__ = [
    "Attachment",
    "BlobNotFoundError",
    "ErrorKind",
    "FileInfo",
    "MemoryCache",
    "Page",
    "PageInput",
    "PageStore",
    "StoreError",
    "StoreResult",
    "UploadedFile",
    "kebab_to_title",
    "normalize_page_name",
    "sanitize_html",
    "to_kebab_case",
    "validate_page_input",
]
