import unittest

from app.cache_store import WEATHER, CacheDomain, InMemoryCacheStore, TieredCache
from app.data_sources.openweather_client import CurrentObservation, WeatherCondition
from app.errors import DataUnavailable, UpstreamError
from app.models import WeatherSnapshot
from app.weather_service import WeatherResolver, to_snapshot


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class FakeWeatherSource:
    def __init__(self, observation=None, error=None):
        self.observation = observation
        self.error = error
        self.calls = 0

    def fetch_current(self, latitude, longitude):
        self.calls += 1
        if self.error:
            raise self.error
        return self.observation


def _observation(temp=28.4, condition=WeatherCondition(id=800, description="clear sky", icon="01d")):
    return CurrentObservation(city="Taipei", temperature=temp, feels_like=31.0, humidity=74,
                              wind_speed=3.6, condition=condition)


class TestToSnapshot(unittest.TestCase):
    def test_maps_condition_to_text_and_icon(self):
        snap = to_snapshot(_observation())
        self.assertEqual(snap.condition_text, "맑음")
        self.assertEqual(snap.icon_url, "https://openweathermap.org/img/wn/01d@2x.png")
        self.assertEqual(snap.humidity_pct, 74)

    def test_unknown_condition_uses_provider_text(self):
        snap = to_snapshot(_observation(condition=WeatherCondition(id=999, description="odd", icon="")))
        self.assertEqual(snap.condition_text, "odd")
        self.assertEqual(snap.icon_url, "")

    def test_missing_condition(self):
        snap = to_snapshot(_observation(condition=None))
        self.assertEqual(snap.condition_text, "")
        self.assertEqual(snap.icon_url, "")


class TestWeatherResolver(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.cache = TieredCache(
            InMemoryCacheStore(clock=self.clock),
            [CacheDomain(WEATHER, WeatherSnapshot, live_ttl_seconds=1800, backup_ttl_seconds=21600)],
        )

    def _resolver(self, source):
        return WeatherResolver(self.cache, source, location_key="taipei", latitude=25.033, longitude=121.5654)

    def test_fetches_then_serves_live(self):
        source = FakeWeatherSource(_observation())
        resolver = self._resolver(source)

        first = resolver.resolve()
        second = resolver.resolve()

        self.assertEqual(first.temperature, 28.4)
        self.assertEqual(first, second)
        self.assertEqual(source.calls, 1)

    def test_backup_served_after_live_expires_and_provider_fails(self):
        self._resolver(FakeWeatherSource(_observation())).resolve()
        self.clock.now = 1801.0

        snap = self._resolver(FakeWeatherSource(error=UpstreamError("down", provider="openweather"))).resolve()
        self.assertEqual(snap.temperature, 28.4)

    def test_unavailable_without_backup(self):
        resolver = self._resolver(FakeWeatherSource(error=UpstreamError("down", provider="openweather")))
        with self.assertRaises(DataUnavailable):
            resolver.resolve()

    def test_refresh_bypasses_live(self):
        source = FakeWeatherSource(_observation())
        resolver = self._resolver(source)
        resolver.resolve()
        source.observation = _observation(temp=30.1)

        self.assertEqual(resolver.refresh().temperature, 30.1)
        self.assertEqual(source.calls, 2)


if __name__ == "__main__":
    unittest.main()
