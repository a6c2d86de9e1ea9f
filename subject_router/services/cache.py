"""
In-process key/value cache with absolute, write-relative expiration.

- Every write resets the entry's expiry clock
- Reads of expired entries behave as misses and evict lazily
- A lock guards all access so concurrent turns never corrupt the map
"""
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar
from datetime import datetime, timedelta
import threading

T = TypeVar("T")


class TTLCache(Generic[T]):
    def __init__(self, ttl: timedelta, clock: Callable[[], datetime] = datetime.now):
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        self._ttl = ttl
        self._clock = clock
        self._entries: Dict[Any, Tuple[T, datetime]] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def _is_expired(self, expires_at: datetime) -> bool:
        return self._clock() >= expires_at

    def get(self, key: Any) -> Optional[T]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._is_expired(expires_at):
                del self._entries[key]
                return None
            return value

    def set(self, key: Any, value: T) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + self._ttl)

    def pop(self, key: Any) -> Optional[T]:
        with self._lock:
            entry = self._entries.pop(key, None)
        if entry is None or self._is_expired(entry[1]):
            return None
        return entry[0]

    def expires_at(self, key: Any) -> Optional[datetime]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or self._is_expired(entry[1]):
                return None
            return entry[1]

    def keys(self) -> List[Any]:
        """Keys of live entries."""
        with self._lock:
            return [k for k, (_, exp) in self._entries.items() if not self._is_expired(exp)]

    def purge_expired(self) -> int:
        with self._lock:
            expired = [k for k, (_, exp) in self._entries.items() if self._is_expired(exp)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __contains__(self, key: Any) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self.keys())
