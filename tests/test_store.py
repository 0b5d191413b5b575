"""
Tests for counting stores, key naming and the store factory.
"""
import asyncio
from unittest.mock import MagicMock

import pytest
import redis

from beacon_app.config import settings
from beacon_app.store.factory import CounterStoreFactory, StoreBackend
from beacon_app.store.keys import KeySpace, normalize_prefix
from beacon_app.store.strategies import InMemoryCounterStore, RedisCounterStore


class TestKeySpace:
    """Test key prefix normalization and key layout"""

    @pytest.mark.parametrize("prefix, expected", [
        ("app", "app:"),
        ("", ""),
        ("app:", "app:"),
        ("a:b", "a:b:"),
    ])
    def test_normalize_prefix(self, prefix, expected):
        assert normalize_prefix(prefix) == expected

    def test_keys_with_prefix(self):
        keys = KeySpace("app")

        assert keys.site_uv("example.com") == "app:site_uv:example.com"
        assert keys.site_pv() == "app:site_pv"
        assert keys.page_pv("example.com") == "app:page_pv:example.com"

    def test_keys_without_prefix(self):
        keys = KeySpace("")

        assert keys.site_uv("example.com") == "site_uv:example.com"
        assert keys.site_pv() == "site_pv"
        assert keys.page_pv("example.com") == "page_pv:example.com"


class TestInMemoryCounterStore:
    """Test the in-memory store semantics"""

    def test_set_add_is_idempotent(self):
        store = InMemoryCounterStore()

        asyncio.run(store.set_add("s", "a"))
        asyncio.run(store.set_add("s", "a"))
        asyncio.run(store.set_add("s", "b"))

        assert asyncio.run(store.set_cardinality("s")) == 2

    def test_missing_set_is_empty(self):
        assert asyncio.run(InMemoryCounterStore().set_cardinality("nope")) == 0

    def test_hash_increment_returns_new_value(self):
        store = InMemoryCounterStore()

        assert asyncio.run(store.hash_increment("h", "f", 1)) == 1
        assert asyncio.run(store.hash_increment("h", "f", 1)) == 2
        assert asyncio.run(store.hash_increment("h", "g", 5)) == 5


class TestRedisCounterStore:
    """Test command mapping onto the redis client"""

    def test_set_add(self):
        client = MagicMock()
        store = RedisCounterStore(client)

        asyncio.run(store.set_add("site_uv:example.com", "1.2.3.4"))

        client.sadd.assert_called_once_with("site_uv:example.com", "1.2.3.4")

    def test_set_cardinality(self):
        client = MagicMock()
        client.scard.return_value = 7
        store = RedisCounterStore(client)

        assert asyncio.run(store.set_cardinality("site_uv:example.com")) == 7
        client.scard.assert_called_once_with("site_uv:example.com")

    def test_hash_increment(self):
        client = MagicMock()
        client.hincrby.return_value = 42
        store = RedisCounterStore(client)

        assert asyncio.run(store.hash_increment("site_pv", "example.com", 1)) == 42
        client.hincrby.assert_called_once_with("site_pv", "example.com", 1)

    def test_errors_propagate(self):
        client = MagicMock()
        client.hincrby.side_effect = redis.ConnectionError("down")
        store = RedisCounterStore(client)

        with pytest.raises(redis.ConnectionError):
            asyncio.run(store.hash_increment("site_pv", "example.com", 1))


class TestCounterStoreFactory:
    """Test store factory"""

    def test_creates_memory_store(self):
        store = CounterStoreFactory.create(StoreBackend.MEMORY)

        assert isinstance(store, InMemoryCounterStore)
        assert CounterStoreFactory.create(StoreBackend.MEMORY) is store

    def test_redis_store_kept_after_failed_pings(self, monkeypatch):
        client = MagicMock()
        client.ping.side_effect = redis.ConnectionError("refused")
        monkeypatch.setattr(redis, "from_url", lambda *args, **kwargs: client)
        monkeypatch.setattr(settings, "store_connect_retries", 3)
        monkeypatch.setattr(settings, "store_connect_retry_delay", 0)

        store = CounterStoreFactory.create(StoreBackend.REDIS)

        assert isinstance(store, RedisCounterStore)
        assert client.ping.call_count == 3

    def test_redis_store_stops_pinging_once_up(self, monkeypatch):
        client = MagicMock()
        client.ping.side_effect = [redis.ConnectionError("refused"), True]
        monkeypatch.setattr(redis, "from_url", lambda *args, **kwargs: client)
        monkeypatch.setattr(settings, "store_connect_retry_delay", 0)

        CounterStoreFactory.create(StoreBackend.REDIS)

        assert client.ping.call_count == 2

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            StoreBackend("memcached")
