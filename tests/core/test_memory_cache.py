"""
Test suite for MemoryCache.

System role: Verification of in-process caching
"""

from unittest.mock import patch

from finna.core.cache import MemoryCache


class TestMemoryCache:
    """Test suite for MemoryCache."""

    def test_missing_item_returns_none(self) -> None:
        assert MemoryCache().get_item("missing") is None

    def test_set_and_get(self) -> None:
        cache = MemoryCache()
        cache.set_item("key", {"a": 1})

        assert cache.get_item("key") == {"a": 1}

    def test_expired_item_returns_none(self) -> None:
        cache = MemoryCache(ttl=10)
        with patch("finna.core.cache.time.monotonic", return_value=100.0):
            cache.set_item("key", "value")
        with patch("finna.core.cache.time.monotonic", return_value=105.0):
            assert cache.get_item("key") == "value"
        with patch("finna.core.cache.time.monotonic", return_value=111.0):
            assert cache.get_item("key") is None

    def test_clear(self) -> None:
        cache = MemoryCache()
        cache.set_item("key", "value")

        cache.clear()

        assert cache.get_item("key") is None
