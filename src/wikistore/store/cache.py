"""Time-bounded in-memory cache for the page listing."""

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Tuple

from .schema import utcnow

logger = logging.getLogger(__name__)


class Cache(ABC):
    """Key/value cache with absolute expiration."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl: timedelta) -> None:
        """Cache ``value`` until ``ttl`` from now."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Drop ``key`` if present."""


class MemoryCache(Cache):
    """Process-local cache. Each entry expires at a fixed time after it was set."""

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        # Cache maps <key> -> (<value>, <expires_at>)
        self._entries: Dict[str, Tuple[Any, datetime]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                logger.debug(f"Cache entry expired: {key}")
                return None
            return value

    def set(self, key: str, value: Any, ttl: timedelta) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl)

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
