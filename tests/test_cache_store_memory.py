import unittest

from app.cache_store.memory import InMemoryCacheStore


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestInMemoryCacheStore(unittest.TestCase):
    def test_entry_visible_until_ttl_elapses(self):
        clock = FakeClock()
        store = InMemoryCacheStore(clock=clock)
        store.set("k", {"rate": 42.5}, ttl_seconds=10)

        clock.now = 1009.9
        self.assertEqual(store.get("k").value, {"rate": 42.5})

        clock.now = 1010.0
        self.assertIsNone(store.get("k"))

    def test_returned_values_are_copies(self):
        store = InMemoryCacheStore(clock=FakeClock())
        value = {"items": [1, 2]}
        store.set("k", value, ttl_seconds=10)
        value["items"].append(3)

        first = store.get("k").value
        first["items"].append(4)
        self.assertEqual(store.get("k").value, {"items": [1, 2]})

    def test_delete_and_clear(self):
        store = InMemoryCacheStore(clock=FakeClock())
        store.set("a", 1, ttl_seconds=10)
        store.set("b", 2, ttl_seconds=10)

        store.delete("a")
        store.delete("missing")
        self.assertIsNone(store.get("a"))
        self.assertEqual(store.get("b").value, 2)

        store.clear()
        self.assertIsNone(store.get("b"))

    def test_stored_at_uses_clock(self):
        store = InMemoryCacheStore(clock=FakeClock(now=55.0))
        store.set("k", "v", ttl_seconds=1)
        self.assertEqual(store.get("k").stored_at, 55.0)


if __name__ == "__main__":
    unittest.main()
