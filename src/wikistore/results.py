"""Tagged results returned by the mutating PageStore operations."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .types import Page


class ErrorKind(str, Enum):
    """Why a store operation did not succeed."""

    NOT_FOUND = "not_found"
    HOME_PAGE_PROTECTED = "home_page_protected"
    CONFLICT = "conflict"
    INVALID = "invalid"
    # The blob is gone but the page still lists it, or the other way round.
    PARTIAL = "partial"
    DATABASE = "database"


@dataclass(frozen=True)
class StoreResult:
    """Outcome of a save or delete.

    ``page`` carries whatever page state is known, including on some
    failures (e.g. ``PARTIAL``). ``error`` is only set when an exception
    was captured.
    """

    ok: bool
    page: Optional[Page] = None
    error: Optional[Exception] = None
    kind: Optional[ErrorKind] = None
    created: bool = False

    @classmethod
    def success(
        cls, page: Optional[Page] = None, created: bool = False
    ) -> "StoreResult":
        return cls(ok=True, page=page, created=created)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        page: Optional[Page] = None,
        error: Optional[Exception] = None,
    ) -> "StoreResult":
        return cls(ok=False, page=page, error=error, kind=kind)

    @property
    def is_partial(self) -> bool:
        return self.kind is ErrorKind.PARTIAL

    def __bool__(self) -> bool:
        return self.ok
