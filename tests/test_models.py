import datetime as dt
import unittest

from pydantic import ValidationError

from app.errors import DataUnavailable, InvalidCategory, InvalidInput, SpotNotFound, UpstreamError
from app.models import ExchangeRate, SpotCategory, SpotSearchCriteria


class TestSpotCategory(unittest.TestCase):
    def test_parses_case_insensitively(self):
        self.assertIs(SpotCategory.from_raw(" Cafe "), SpotCategory.CAFE)
        self.assertEqual(SpotCategory.from_raw("attraction").provider_type, "tourist_attraction")

    def test_rejects_unknown_and_blank(self):
        for raw in (None, "", "  ", "bar"):
            with self.assertRaises(InvalidCategory):
                SpotCategory.from_raw(raw)


class TestSpotSearchCriteria(unittest.TestCase):
    def test_defaults_applied(self):
        c = SpotSearchCriteria.from_params()
        self.assertEqual((c.lat, c.lng, c.radius_m), (25.0330, 121.5654, 5000))
        self.assertFalse(c.open_now)
        self.assertIsNone(c.min_rating)

    def test_out_of_range_fields_are_invalid_input(self):
        cases = [
            {"lat": 99.0},
            {"lng": -181.0},
            {"radius": 0},
            {"radius": 50001},
            {"min_rating": 5.5},
        ]
        for kwargs in cases:
            with self.assertRaises(InvalidInput) as ctx:
                SpotSearchCriteria.from_params(**kwargs)
            self.assertTrue(ctx.exception.details["fields"])

    def test_boundaries_are_accepted(self):
        c = SpotSearchCriteria.from_params(lat=-90, lng=180, radius=50000, min_rating=0)
        self.assertEqual(c.radius_m, 50000)

    def test_cache_key_keeps_full_coordinate_precision(self):
        a = SpotSearchCriteria.from_params(lat=25.03296)
        b = SpotSearchCriteria.from_params(lat=25.03304)
        self.assertNotEqual(a.cache_key(), b.cache_key())
        self.assertTrue(a.cache_key().startswith("25.03296:121.5654:"))

    def test_cache_key_distinguishes_every_field(self):
        base = SpotSearchCriteria.from_params()
        variants = [
            SpotSearchCriteria.from_params(lat=25.0331),
            SpotSearchCriteria.from_params(radius=4999),
            SpotSearchCriteria.from_params(open_now=True),
            SpotSearchCriteria.from_params(min_rating=4.0),
            SpotSearchCriteria.from_params(min_rating=4.05),
        ]
        keys = {base.cache_key()} | {v.cache_key() for v in variants}
        self.assertEqual(len(keys), 6)


class TestModels(unittest.TestCase):
    def test_exchange_rate_is_frozen(self):
        rate = ExchangeRate(currency="TWD", base_rate=42.55, buy_rate=42.12, sell_rate=42.98,
                            as_of_date=dt.date(2025, 3, 10))
        with self.assertRaises(ValidationError):
            rate.base_rate = 1.0


class TestErrors(unittest.TestCase):
    def test_codes_and_statuses(self):
        self.assertEqual((InvalidInput.code, InvalidInput.http_status), ("CM001", 400))
        self.assertEqual((InvalidCategory.code, InvalidCategory.http_status), ("SP002", 400))
        self.assertEqual((SpotNotFound.code, SpotNotFound.http_status), ("SP001", 404))
        self.assertEqual((DataUnavailable.code, DataUnavailable.http_status), ("EX002", 503))
        self.assertEqual((UpstreamError.code, UpstreamError.http_status), ("EX001", 502))

    def test_payloads(self):
        self.assertEqual(
            SpotNotFound(details={"id": "x"}).to_payload(),
            {"code": "SP001", "message": "Spot not found.", "status": 404, "details": {"id": "x"}},
        )
        payload = UpstreamError("boom", provider="openweather", status_code=503).to_payload()
        self.assertEqual(payload["provider"], "openweather")
        self.assertEqual(payload["upstream_status"], 503)


if __name__ == "__main__":
    unittest.main()
