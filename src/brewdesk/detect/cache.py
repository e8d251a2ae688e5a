"""Time-to-live cache for detection results."""

import time
from collections.abc import Callable

from ..constants import DEFAULT_CACHE_TTL
from .result import CacheEntry, DetectionResult


class DetectionCache:
    """Caches detection results per package with a fixed TTL.

    Expiry is lazy: a stale entry is removed only when get() (or has())
    reads it, or on delete()/clear(). Until then it still counts towards
    size.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._entries: dict[str, CacheEntry] = {}
        self._ttl_ms = ttl_seconds * 1000
        self._clock = clock

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def get(self, package_name: str) -> DetectionResult | None:
        """Return the cached result, or None if absent or expired."""
        entry = self._entries.get(package_name)
        if entry is None:
            return None

        if self._now_ms() - entry.timestamp > self._ttl_ms:
            del self._entries[package_name]
            return None

        return entry.result

    def set(self, package_name: str, result: DetectionResult) -> None:
        """Store result for package_name, replacing any existing entry."""
        self._entries[package_name] = CacheEntry(
            result=result, timestamp=self._now_ms()
        )

    def delete(self, package_name: str) -> None:
        """Invalidate the entry for package_name, if any."""
        self._entries.pop(package_name, None)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def has(self, package_name: str) -> bool:
        """Check for a live entry. Evicts the entry if it has expired."""
        return self.get(package_name) is not None

    @property
    def size(self) -> int:
        """Number of stored entries, including expired ones not yet read."""
        return len(self._entries)

    def __len__(self) -> int:
        return self.size

    @property
    def ttl_ms(self) -> float:
        """TTL in milliseconds."""
        return self._ttl_ms
