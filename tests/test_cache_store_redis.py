import json
import unittest

from redis.exceptions import ConnectionError as RedisConnectionError

from app.cache_store.redis import RedisCacheStore


class FakeRedis:
    def __init__(self):
        self.store = {}
        self.expires = {}

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.expires[key] = ttl

    def get(self, key):
        return self.store.get(key)

    def delete(self, key):
        self.store.pop(key, None)
        self.expires.pop(key, None)

    def scan_iter(self, pattern):
        prefix = pattern.rstrip("*")
        return [k for k in list(self.store.keys()) if k.startswith(prefix)]


class BrokenRedis:
    def _fail(self, *args, **kwargs):
        raise RedisConnectionError("connection refused")

    setex = get = delete = scan_iter = _fail


class TestRedisCacheStore(unittest.TestCase):
    def test_set_uses_setex_with_prefix_and_ttl(self):
        client = FakeRedis()
        store = RedisCacheStore(client, prefix="travel:", clock=lambda: 100.0)
        store.set("weather:live:taipei", {"temperature": 28.5}, ttl_seconds=1800)

        key = "travel:weather:live:taipei"
        self.assertIn(key, client.store)
        self.assertEqual(client.expires[key], 1800)
        self.assertEqual(json.loads(client.store[key]), {"value": {"temperature": 28.5}, "stored_at": 100.0})

    def test_get_round_trips_entry(self):
        client = FakeRedis()
        store = RedisCacheStore(client, prefix="travel:", clock=lambda: 100.0)
        store.set("k", ["a", "한글"], ttl_seconds=10)

        entry = store.get("k")
        self.assertEqual(entry.value, ["a", "한글"])
        self.assertEqual(entry.stored_at, 100.0)

    def test_missing_and_corrupt_entries_are_misses(self):
        client = FakeRedis()
        store = RedisCacheStore(client, prefix="travel:")
        self.assertIsNone(store.get("missing"))

        client.store["travel:bad"] = b"not-json"
        self.assertIsNone(store.get("bad"))

    def test_clear_removes_prefixed_keys_only(self):
        client = FakeRedis()
        store = RedisCacheStore(client, prefix="travel:")
        store.set("a", 1, ttl_seconds=10)
        client.store["other:b"] = b"{}"

        store.clear()
        self.assertEqual(list(client.store), ["other:b"])

    def test_redis_failures_are_not_raised(self):
        store = RedisCacheStore(BrokenRedis(), prefix="travel:")
        store.set("k", 1, ttl_seconds=10)
        self.assertIsNone(store.get("k"))
        store.delete("k")
        store.clear()


if __name__ == "__main__":
    unittest.main()
