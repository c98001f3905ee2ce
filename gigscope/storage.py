"""Key-value persistence: report cache, search history and favorites."""
import logging
import os
import time
from typing import Any, Callable, Optional, Protocol

from dotenv import load_dotenv

from .models import Report

load_dotenv()

logger = logging.getLogger(__name__)

ANALYSIS_TTL = float(os.getenv("GIGSCOPE_ANALYSIS_TTL", "600"))
SUGGESTION_TTL = float(os.getenv("GIGSCOPE_SUGGESTION_TTL", "300"))

HISTORY_KEY = "searchHistory"
FAVORITES_KEY = "favorites"
HISTORY_LIMIT = 10


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """In-process store. Values are kept as given."""

    def __init__(self, initial: Optional[dict] = None):
        self._data = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class TTLCache:
    """Entries stored as {"data", "timestamp"} under a key prefix; stale entries read as None."""

    def __init__(
        self,
        store: KeyValueStore,
        ttl_seconds: float,
        prefix: str,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix
        self.clock = clock

    def _key(self, name: str) -> str:
        return f"{self.prefix}{name}"

    def get(self, name: str) -> Any:
        entry = self.store.get(self._key(name))
        if not entry:
            return None
        if self.clock() - entry["timestamp"] >= self.ttl_seconds:
            return None
        logger.debug(f"Cache hit for {self._key(name)}")
        return entry["data"]

    def put(self, name: str, data: Any) -> None:
        self.store.set(self._key(name), {"data": data, "timestamp": self.clock()})

    def invalidate(self, name: str) -> None:
        self.store.delete(self._key(name))


class ReportCache(TTLCache):
    """Analysis reports keyed by keyword."""

    def __init__(
        self,
        store: KeyValueStore,
        ttl_seconds: float = ANALYSIS_TTL,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(store, ttl_seconds, "analysis_", clock)

    def get_report(self, keyword: str) -> Optional[Report]:
        data = self.get(keyword)
        if data is None:
            return None
        return Report.from_dict(data)

    def put_report(self, report: Report) -> None:
        self.put(report.keyword, report.to_dict())


class SearchHistory:
    """Most recent keywords first, each keyword at most once."""

    def __init__(self, store: KeyValueStore, limit: int = HISTORY_LIMIT, clock: Callable[[], float] = time.time):
        self.store = store
        self.limit = limit
        self.clock = clock

    def entries(self) -> list[dict]:
        return list(self.store.get(HISTORY_KEY) or [])

    def record(self, keyword: str) -> list[dict]:
        history = [item for item in self.entries() if item["keyword"] != keyword]
        history.insert(0, {"keyword": keyword, "date": self.clock()})
        history = history[: self.limit]
        self.store.set(HISTORY_KEY, history)
        return history

    def clear(self) -> None:
        self.store.set(HISTORY_KEY, [])


class Favorites:
    def __init__(self, store: KeyValueStore, clock: Callable[[], float] = time.time):
        self.store = store
        self.clock = clock

    def entries(self) -> list[dict]:
        return list(self.store.get(FAVORITES_KEY) or [])

    def add(self, keyword: str, data: Optional[dict] = None) -> list[dict]:
        """
        Raises:
            ValueError: keyword already saved
        """
        favorites = self.entries()
        if any(item["keyword"] == keyword for item in favorites):
            raise ValueError(f"Keyword already in favorites: {keyword}")
        favorites.append({"keyword": keyword, "timestamp": self.clock(), "data": data})
        self.store.set(FAVORITES_KEY, favorites)
        return favorites

    def remove(self, keyword: str) -> list[dict]:
        favorites = [item for item in self.entries() if item["keyword"] != keyword]
        self.store.set(FAVORITES_KEY, favorites)
        return favorites

    def clear(self) -> None:
        self.store.set(FAVORITES_KEY, [])
