"""Thread-safe expiring key/value cache.

Used twice by the authorization client: once for router responses (keyed by a
request fingerprint) and once for token verification results (keyed by the
raw access token). Entries leave the cache only when their TTL runs out,
either lazily on read or during the periodic background sweep.
"""
from __future__ import annotations
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_GC_INTERVAL = 300


@dataclass
class CacheEntry:
    """Cached value with its absolute expiry on the cache clock."""
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class ExpiringCache:
    """In-memory cache with per-entry TTL and background garbage collection.

    Usage:
        cache = ExpiringCache(gc_interval=300)
        cache.set("key", b"{}", 60)
        cache.get("key")  # b"{}" for the next 60 seconds, then None
    """

    def __init__(
        self,
        gc_interval: int = DEFAULT_GC_INTERVAL,
        clock: Optional[Callable[[], float]] = None,
        start_sweeper: bool = True,
    ):
        """Initialize cache.

        Args:
            gc_interval: Seconds between background sweeps (defaults to 300 when not positive)
            clock: Monotonic time source (defaults to time.monotonic)
            start_sweeper: Start the background sweep thread
        """
        self.gc_interval = gc_interval if gc_interval and gc_interval > 0 else DEFAULT_GC_INTERVAL
        self._clock = clock or time.monotonic
        self._items: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._sweeper: Optional[threading.Thread] = None
        if start_sweeper:
            self._sweeper = threading.Thread(
                target=self._run_sweeper,
                name="asapi-cache-gc",
                daemon=True,
            )
            self._sweeper.start()

    def get(self, key: str) -> Any:
        """Return the live value stored under key, or None."""
        with self._lock:
            entry = self._items.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._items[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store value under key for ttl seconds, replacing any previous entry."""
        if ttl <= 0:
            raise ValueError(f"Cache TTL must be positive, got {ttl}")
        entry = CacheEntry(value=value, expires_at=self._clock() + ttl)
        with self._lock:
            self._items[key] = entry

    def delete_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._items.items() if entry.is_expired(now)]
            for key in expired:
                del self._items[key]
        if expired:
            logger.debug(f"Cache sweep removed {len(expired)} expired entries")
        return len(expired)

    def close(self) -> None:
        """Stop the background sweeper. Lazy expiry keeps working afterwards."""
        self._stop.set()
        if self._sweeper is not None and self._sweeper is not threading.current_thread():
            self._sweeper.join(timeout=1)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def _run_sweeper(self) -> None:
        while not self._stop.wait(self.gc_interval):
            self.delete_expired()
