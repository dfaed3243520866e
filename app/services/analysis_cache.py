"""
app/services/analysis_cache.py

Process-local, time-boxed cache for primary site analyses.
"""

from __future__ import annotations

import copy
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

CACHE_KEY_PREFIX = "analysis:"


def analysis_cache_key(url: str) -> str:
    return f"{CACHE_KEY_PREFIX}{url}"


class AnalysisCache(Protocol):
    """
    Minimal cache capability used by the orchestrator.
    """

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...


@dataclass
class _CacheEntry:
    data: Any
    timestamp: float


class TTLAnalysisCache:
    """
    In-memory cache whose entries expire ``ttl_seconds`` after being set.

    Expiry is checked on read: a stale entry is deleted when it is next
    looked up. There is no size bound and no background sweep. Values are
    deep-copied on the way in and out so callers cannot mutate stored data.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.timestamp >= self._ttl_seconds:
                del self._entries[key]
                return None
            return copy.deepcopy(entry.data)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = _CacheEntry(data=copy.deepcopy(value), timestamp=self._clock())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
