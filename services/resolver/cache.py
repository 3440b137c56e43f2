from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
import logging
import threading
import time

from services.resolver.models import ResolutionResult

logger = logging.getLogger(__name__)

DEFAULT_TTL_SEC = 24 * 60 * 60


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: ResolutionResult
    created_at: float


class ResolutionCache:
    """In-process memo of resolutions keyed by normalized input.

    Entries expire ``ttl_sec`` after they were written and are dropped on the
    next read. There is no size bound.
    """

    def __init__(self, ttl_sec: float = DEFAULT_TTL_SEC, clock: Callable[[], float] = time.time):
        self.ttl_sec = ttl_sec
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> Optional[ResolutionResult]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if now - entry.created_at >= self.ttl_sec:
                del self._entries[key]
                logger.debug("cache entry expired for %r", key)
                return None
            return entry.value

    def set(self, key: str, value: ResolutionResult) -> None:
        entry = CacheEntry(key=key, value=value, created_at=self._clock())
        with self._lock:
            self._entries[key] = entry

    def clear(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def stats(self) -> Dict[str, Any]:
        now = self._clock()
        with self._lock:
            entries = list(self._entries.values())
        return {
            "size": len(entries),
            "entries": [
                {"key": e.key, "ticker": e.value.ticker, "age": now - e.created_at}
                for e in entries
            ],
        }
