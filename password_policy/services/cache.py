# password_policy/services/cache.py
"""In-process TTL cache for expiry results

The expiry service only needs ``get(key)``, ``set(key, value, timeout)`` and
``delete(key)``, the same calls a Flask-Caching ``Cache`` or a cachelib backend
answers to, so a shared networked cache can be passed instead of this one.
"""
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple


class ExpiryCache:
    """Thread-safe dictionary cache with per-key expiry"""

    def __init__(self, default_timeout: int = 3600, timer: Callable[[], float] = time.monotonic):
        self.default_timeout = default_timeout
        self._timer = timer
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if missing or timed out"""
        with self._lock:
            item = self._entries.get(key)
            if item is None:
                return None
            value, expires = item
            if expires <= self._timer():
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, timeout: Optional[int] = None) -> bool:
        ttl = self.default_timeout if timeout is None else timeout
        with self._lock:
            self._entries[key] = (value, self._timer() + ttl)
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> bool:
        with self._lock:
            self._entries.clear()
        return True

    def __len__(self):
        with self._lock:
            return len(self._entries)
