import datetime as dt
import unittest
from typing import List
from zoneinfo import ZoneInfo

from app.cache_store import WEATHER_FORECAST, CacheDomain, CacheTier, InMemoryCacheStore, TieredCache
from app.data_sources.openweather_client import ForecastSample, WeatherCondition
from app.errors import DataUnavailable, UpstreamError
from app.forecast_service import ForecastAggregator, aggregate_forecast, representative_sample
from app.models import ForecastDay

TAIPEI = ZoneInfo("Asia/Taipei")


def _sample(utc_text, temp_min, temp_max, cond_id=800, icon="01d"):
    time = dt.datetime.strptime(utc_text, "%Y-%m-%d %H:%M").replace(tzinfo=dt.timezone.utc)
    return ForecastSample(time=time, temp_min=temp_min, temp_max=temp_max,
                          condition=WeatherCondition(id=cond_id, description="", icon=icon))


class FakeForecastSource:
    def __init__(self, samples=None, error=None):
        self.samples = samples or []
        self.error = error
        self.calls = 0

    def fetch_forecast(self, latitude, longitude):
        self.calls += 1
        if self.error:
            raise self.error
        return self.samples


class TestAggregateForecast(unittest.TestCase):
    def test_groups_by_local_date(self):
        samples = [
            _sample("2025-03-09 15:00", 17.0, 19.0),            # 03-09 23:00 local
            _sample("2025-03-09 18:00", 16.0, 18.0),            # 03-10 02:00 local
            _sample("2025-03-10 03:00", 20.0, 24.0, 500, "10d"),  # 03-10 11:00 local
            _sample("2025-03-10 06:00", 21.0, 25.5, 804, "04d"),  # 03-10 14:00 local
        ]

        days = aggregate_forecast(samples, TAIPEI)

        self.assertEqual([d.date for d in days], [dt.date(2025, 3, 9), dt.date(2025, 3, 10)])
        self.assertEqual((days[1].min_temp, days[1].max_temp), (16.0, 25.5))
        self.assertEqual(days[1].condition_text, "가벼운 비")
        self.assertEqual(days[1].icon_url, "https://openweathermap.org/img/wn/10d@2x.png")
        self.assertEqual((days[0].min_temp, days[0].max_temp), (17.0, 19.0))

    def test_output_is_ascending_even_for_unordered_input(self):
        samples = [
            _sample("2025-03-11 04:00", 20.0, 22.0),
            _sample("2025-03-10 04:00", 19.0, 21.0),
        ]
        days = aggregate_forecast(samples, TAIPEI)
        self.assertEqual([d.date for d in days], [dt.date(2025, 3, 10), dt.date(2025, 3, 11)])

    def test_noon_tie_keeps_first_sample(self):
        first = _sample("2025-03-10 03:00", 20.0, 22.0, 800)   # 11:00 local
        second = _sample("2025-03-10 05:00", 20.0, 22.0, 801)  # 13:00 local
        self.assertIs(representative_sample([first, second], TAIPEI), first)

    def test_empty_input(self):
        self.assertEqual(aggregate_forecast([], TAIPEI), [])


class TestForecastAggregator(unittest.TestCase):
    def setUp(self):
        self.cache = TieredCache(
            InMemoryCacheStore(),
            [CacheDomain(WEATHER_FORECAST, List[ForecastDay], live_ttl_seconds=3600)],
        )

    def _aggregator(self, source):
        return ForecastAggregator(self.cache, source, location_key="taipei", latitude=25.033,
                                  longitude=121.5654, timezone="Asia/Taipei")

    def test_caches_days(self):
        source = FakeForecastSource([_sample("2025-03-10 04:00", 19.0, 21.0)])
        aggregator = self._aggregator(source)

        first = aggregator.resolve()
        second = aggregator.resolve()

        self.assertEqual(first, second)
        self.assertEqual(source.calls, 1)
        self.assertIsNone(self.cache.get(WEATHER_FORECAST, "taipei", CacheTier.BACKUP))

    def test_failure_without_live_entry_is_unavailable(self):
        aggregator = self._aggregator(FakeForecastSource(error=UpstreamError("down", provider="openweather")))
        with self.assertRaises(DataUnavailable):
            aggregator.resolve()

    def test_refresh_refetches(self):
        source = FakeForecastSource([_sample("2025-03-10 04:00", 19.0, 21.0)])
        aggregator = self._aggregator(source)
        aggregator.resolve()
        source.samples = [_sample("2025-03-10 04:00", 18.0, 23.0)]

        days = aggregator.refresh()
        self.assertEqual(days[0].max_temp, 23.0)
        self.assertEqual(source.calls, 2)


if __name__ == "__main__":
    unittest.main()
