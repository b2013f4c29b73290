"""
Generated-page cache, namespaced by provider.

Keys look like ``{prefix}{structured_}{model_}{result_id}``; a new search
drops every entry under a provider prefix at once. Storage failures never
reach the caller: reads degrade to a miss and writes are skipped.
"""

import threading
from abc import ABC, abstractmethod

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

from db.repository import delete_prefix, get_value, set_value
from utils.logger import get_logger

logger = get_logger(__name__)

STRUCTURED_SEGMENT = "structured_"


def build_cache_key(
    prefix: str,
    result_id: str,
    model_id: str | None = None,
    structured: bool = False,
) -> str:
    """
    Build the cache key for one generated page.

    Args:
        prefix: Provider namespace, e.g. ``mdlxSearch_geminiPageCache_``
        result_id: Id of the search result the page belongs to
        model_id: Model name for providers whose output depends on the chosen model
        structured: True for the structured-content representation
    """
    key = prefix
    if structured:
        key += STRUCTURED_SEGMENT
    if model_id:
        key += f"{model_id}_"
    return key + result_id


class PageCache(ABC):
    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def clear_namespace(self, prefix: str) -> None:
        pass


class InMemoryPageCache(PageCache):
    """Process-local cache; lost on restart."""

    def __init__(self):
        self._entries: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._entries[key] = value

    def clear_namespace(self, prefix: str) -> None:
        with self._lock:
            stale = [key for key in self._entries if key.startswith(prefix)]
            for key in stale:
                del self._entries[key]
        logger.debug(
            "Cleared page cache namespace",
            extra={"extra_fields": {"prefix": prefix, "removed": len(stale)}},
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class SqlPageCache(PageCache):
    """Cache stored in the key/value table; survives restarts."""

    def __init__(self, engine: Engine):
        self._engine = engine

    def get(self, key: str) -> str | None:
        try:
            with self._engine.begin() as conn:
                return get_value(conn, key)
        except SQLAlchemyError as exc:
            logger.warning(
                "Page cache read failed, treating as miss",
                extra={"extra_fields": {"key": key, "error": str(exc)}},
            )
            return None

    def put(self, key: str, value: str) -> None:
        try:
            with self._engine.begin() as conn:
                set_value(conn, key, value)
        except SQLAlchemyError as exc:
            logger.warning(
                "Page cache write failed, entry not stored",
                extra={"extra_fields": {"key": key, "error": str(exc)}},
            )

    def clear_namespace(self, prefix: str) -> None:
        try:
            with self._engine.begin() as conn:
                removed = delete_prefix(conn, prefix)
        except SQLAlchemyError as exc:
            logger.warning(
                "Page cache clear failed",
                extra={"extra_fields": {"prefix": prefix, "error": str(exc)}},
            )
            return
        logger.debug(
            "Cleared page cache namespace",
            extra={"extra_fields": {"prefix": prefix, "removed": removed}},
        )


def create_page_cache(backend: str, engine: Engine | None = None) -> PageCache:
    """
    Args:
        backend: "sql" or "memory"
        engine: Required for the sql backend
    """
    if backend == "memory":
        return InMemoryPageCache()
    if backend == "sql":
        if engine is None:
            raise ValueError("The sql page cache backend needs a database engine")
        return SqlPageCache(engine)
    raise ValueError(f"Unknown page cache backend '{backend}'. Must be 'sql' or 'memory'")
