from __future__ import annotations

import threading
import time
from collections.abc import Callable


class TTLCache:
    def __init__(self, default_ttl_s: int) -> None:
        self.default_ttl_s = max(1, int(default_ttl_s))
        self._data: dict[str, tuple[float, object]] = {}
        self._lock = threading.Lock()

    def get_or_set(self, key: str, ttl_s: int | None, fn: Callable[[], object]) -> object:
        with self._lock:
            now = time.monotonic()
            entry = self._data.get(key)
            if entry is not None:
                expires_at, value = entry
                if expires_at > now:
                    return value
                self._data.pop(key, None)

        # fn runs unlocked; concurrent misses on one key may both compute.
        value = fn()
        ttl_value = self.default_ttl_s if ttl_s is None else max(1, int(ttl_s))
        with self._lock:
            self._data[key] = (time.monotonic() + ttl_value, value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
