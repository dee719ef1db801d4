"""Connection factory handing out one database session per store operation."""

import logging
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from .schema import Base

logger = logging.getLogger(__name__)


def _is_in_memory(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


class ConnectionFactory:
    """Opens a fresh session against the wiki database for every call.

    File-backed sqlite and postgres use ``NullPool`` so that closing the
    session also closes the underlying handle. In-memory sqlite has to share
    a single connection, otherwise each session would see an empty database.

    Example:
        connections = ConnectionFactory("sqlite:///wiki.db")
        with connections.open() as session:
            ...
    """

    def __init__(self, url: str, drop_previous: bool = False) -> None:
        """Initialize the factory and make sure the tables exist.

        Args:
            url: Database URL (e.g., "sqlite:///wiki.db", "sqlite://")
            drop_previous: Whether to drop existing tables on initialization
        """
        engine_args: dict[str, Any] = {}
        if _is_in_memory(url):
            engine_args["poolclass"] = StaticPool
            engine_args["connect_args"] = {"check_same_thread": False}
        else:
            engine_args["poolclass"] = NullPool

        self._engine = create_engine(url, **engine_args)
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)

        if drop_previous:
            Base.metadata.drop_all(self._engine)
            logger.debug("Dropped existing wiki tables")
        Base.metadata.create_all(self._engine)

    def open(self) -> Session:
        """Open a new session. Use it as a context manager so it is always closed."""
        return self._session_factory()

    def dispose(self) -> None:
        self._engine.dispose()
