# recorder/resources/cache.py
from __future__ import annotations
import copy
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

from recorder.core.time import nowSeconds

logger = logging.getLogger(__name__)

__all__ = ["CacheEntry", "MemoryTtlCache", "namespacedKey"]



def namespacedKey(namespace: str, key: str) -> str:
    return f"{namespace}:{key}"



@dataclass(slots=True)
class CacheEntry:
    key: str
    value: Any
    expiresAt: float



class MemoryTtlCache:
    """
    In-process key/value cache with per-entry expiry, the stand-in for
    WordPress transients. Expired entries are dropped lazily on read.

    Last writer wins; the lock only keeps the dict consistent.
    """

    def __init__(self, *, clock: Callable[[], float] = nowSeconds) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expiresAt <= self._clock():
                del self._entries[key]
                logger.debug("Cache entry '%s' expired", key)
                return None
            return copy.deepcopy(entry.value)

    def set(self, key: str, value: Any, ttlSeconds: int) -> None:
        if ttlSeconds <= 0:
            raise ValueError("ttlSeconds must be positive")
        with self._lock:
            self._entries[key] = CacheEntry(
                key=key,
                value=copy.deepcopy(value),
                expiresAt=self._clock() + ttlSeconds,
            )

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)
