import logging
import time
from functools import lru_cache
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel

from essenza_web.app.core.config import get_settings

logger = logging.getLogger(__name__)

RECIPES_PATH = "/recipes"


class CacheEntry(BaseModel):
    value: Any
    stored_at: float
    stale: bool = False


class PageCache:
    """Per-path cache of view data, invalidated explicitly or by age."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, path: str) -> Optional[Any]:
        entry = self._entries.get(path)
        if entry is None or entry.stale:
            return None
        if self._clock() - entry.stored_at > self.ttl_seconds:
            return None
        return entry.value

    def put(self, path: str, value: Any) -> None:
        self._entries[path] = CacheEntry(value=value, stored_at=self._clock())

    def revalidate_path(self, path: str) -> None:
        entry = self._entries.get(path)
        if entry is not None:
            entry.stale = True
        logger.info("Marked cached view %s as stale", path)

    def is_stale(self, path: str) -> bool:
        return self.get(path) is None


@lru_cache
def get_page_cache() -> PageCache:
    return PageCache(get_settings().recipes_cache_ttl_seconds)
