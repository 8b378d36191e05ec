import unittest
from unittest.mock import patch

from redis.exceptions import ConnectionError as RedisConnectionError

from app.cache_store import InMemoryCacheStore, RedisCacheStore
from app.config import Settings
from app.data_sources import KoreaEximClient, OpenErClient, OpenWeatherClient, PlacesClient
from app.data_sources.factory import build_providers
from app.travel_data import build_cache_store


class DummySession:
    def get(self, *args, **kwargs):
        raise AssertionError("no network calls expected")


class TestBuildProviders(unittest.TestCase):
    def test_builds_every_client_on_one_fetcher(self):
        settings = Settings(weather_api_key="w", places_api_key="p", exchange_api_key="e",
                            connect_timeout_ms=1000, response_timeout_ms=2000)
        providers = build_providers(settings, session=DummySession())

        self.assertIsInstance(providers.exchange, KoreaEximClient)
        self.assertIsInstance(providers.cross_rate, OpenErClient)
        self.assertIsInstance(providers.weather, OpenWeatherClient)
        self.assertIsInstance(providers.places, PlacesClient)
        self.assertIs(providers.weather.fetcher, providers.places.fetcher)
        self.assertEqual(providers.places.fetcher.timeout, (1.0, 2.0))
        self.assertEqual(providers.places.api_key, "p")


class FakePingClient:
    def __init__(self, fail=False):
        self.fail = fail

    def ping(self):
        if self.fail:
            raise RedisConnectionError("refused")
        return True


class TestBuildCacheStore(unittest.TestCase):
    def test_in_memory_without_redis_url(self):
        self.assertIsInstance(build_cache_store(Settings(cache_redis_url=None)), InMemoryCacheStore)

    def test_redis_when_reachable(self):
        with patch("app.travel_data.redis.Redis.from_url", return_value=FakePingClient()):
            store = build_cache_store(Settings(cache_redis_url="redis://cache:6379/0", cache_key_prefix="t:"))
        self.assertIsInstance(store, RedisCacheStore)
        self.assertEqual(store.prefix, "t:")

    def test_falls_back_when_redis_unreachable(self):
        with patch("app.travel_data.redis.Redis.from_url", return_value=FakePingClient(fail=True)):
            store = build_cache_store(Settings(cache_redis_url="redis://cache:6379/0"))
        self.assertIsInstance(store, InMemoryCacheStore)


if __name__ == "__main__":
    unittest.main()
