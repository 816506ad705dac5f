"""
src/data/weather_cache.py
─────────────────────────
In-process TTL cache for forecast payloads, keyed by coordinates.

Owned and injected by the weather collaborator; the analytics layer never
touches it. The clock is injectable so expiry can be exercised in tests.

Expired entries are swept on every write, and the cache never holds more
than `max_size` entries (the entry closest to expiry is evicted first).

Usage:
    cache = ForecastCache()
    cache.get(lat, lng)            # → None on miss or expiry
    cache.set(lat, lng, forecast)
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

from config.settings import settings

logger = logging.getLogger(__name__)


def cache_key(lat: float, lng: float) -> str:
    return f"weather_{lat}_{lng}"


class ForecastCache:
    def __init__(
        self,
        ttl_seconds: float = settings.WEATHER_CACHE_TTL_S,
        clock: Callable[[], float] = time.monotonic,
        max_size: int = settings.WEATHER_CACHE_MAX_ENTRIES,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._max_size = max_size
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.RLock()

    def get(self, lat: float, lng: float) -> Any | None:
        key = cache_key(lat, lng)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                logger.debug("Forecast cache expired for %s", key)
                return None
            return value

    def set(self, lat: float, lng: float, value: Any) -> None:
        key = cache_key(lat, lng)
        with self._lock:
            self._cleanup_expired()
            if len(self._entries) >= self._max_size and key not in self._entries:
                self._evict_oldest()
            self._entries[key] = (self._clock() + self._ttl, value)

    def clear(self, lat: float, lng: float) -> None:
        with self._lock:
            self._entries.pop(cache_key(lat, lng), None)

    def clear_all(self) -> None:
        with self._lock:
            self._entries.clear()

    def _cleanup_expired(self) -> int:
        """Remove all expired entries. Returns count removed."""
        now = self._clock()
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Swept %d expired forecast entries", len(expired))
        return len(expired)

    def _evict_oldest(self) -> None:
        if not self._entries:
            return
        oldest = min(self._entries, key=lambda k: self._entries[k][0])
        del self._entries[oldest]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
