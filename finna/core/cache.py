"""
In-process object cache.

Dependencies: time
System role: Caching of merged theme config and home page channels
"""

import time
from typing import Any, Protocol


class CacheStorage(Protocol):
    """Minimal storage interface used by ThemeInfo and ChannelLoader."""

    def get_item(self, key: str) -> Any | None: ...

    def set_item(self, key: str, value: Any) -> None: ...


class MemoryCache:
    """Dict-backed cache with optional per-entry lifetime."""

    def __init__(self, ttl: float | None = None) -> None:
        """
        Args:
            ttl: Entry lifetime in seconds (None keeps entries forever)
        """
        self.ttl = ttl
        self._items: dict[str, tuple[float, Any]] = {}

    def get_item(self, key: str) -> Any | None:
        entry = self._items.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self.ttl is not None and time.monotonic() - stored_at > self.ttl:
            del self._items[key]
            return None
        return value

    def set_item(self, key: str, value: Any) -> None:
        self._items[key] = (time.monotonic(), value)

    def clear(self) -> None:
        self._items.clear()
