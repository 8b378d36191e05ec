"""Resolve the home-currency exchange rate for a target currency.

Order of preference:
1. live cache tier,
2. primary daily quotes for today, then up to `lookback_days` earlier days,
3. the secondary cross-rate provider (inverted, rounded, stamped today),
4. the backup cache tier.
"""
from __future__ import annotations

import datetime as dt
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from app.cache_store import EXCHANGE_RATES, CacheTier, TieredCache
from app.data_sources.base import CrossRateSource, ExchangeQuoteSource
from app.errors import DataUnavailable, InvalidInput, UpstreamError
from app.models import ExchangeRate
from utils.logging_utils import get_tagged_logger
from utils.number_utils import round_half_up

logger = get_tagged_logger(__name__, tag="exchange_service")

DEFAULT_LOOKBACK_DAYS = 3


def today_in(tz_name: str) -> Callable[[], dt.date]:
    """Return a callable giving the current calendar date in `tz_name`."""
    tz = ZoneInfo(tz_name)
    return lambda: dt.datetime.now(tz).date()


class ExchangeRateResolver:
    """Cached, fallback-aware exchange rate lookup."""

    def __init__(
        self,
        cache: TieredCache,
        primary: ExchangeQuoteSource,
        secondary: CrossRateSource,
        *,
        home_currency: str = "KRW",
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
        today: Optional[Callable[[], dt.date]] = None,
    ) -> None:
        self.cache = cache
        self.primary = primary
        self.secondary = secondary
        self.home_currency = home_currency.upper()
        self.lookback_days = lookback_days
        self._today = today or today_in("Asia/Seoul")

    def resolve(self, target_currency: str) -> ExchangeRate:
        """Return the rate for `target_currency`, or raise DataUnavailable."""
        currency = (target_currency or "").strip().upper()
        if not currency:
            raise InvalidInput("Target currency is required.")

        cached = self.cache.get(EXCHANGE_RATES, currency)
        if cached is not None:
            return cached

        try:
            rate = self._fetch(currency)
        except UpstreamError as exc:
            backup = self.cache.get(EXCHANGE_RATES, currency, CacheTier.BACKUP)
            if backup is not None:
                logger.warning(
                    "Serving exchange rate from backup cache",
                    extra={"currency": currency, "as_of_date": backup.as_of_date.isoformat(), "error": str(exc)},
                )
                return backup
            raise DataUnavailable(f"No exchange rate available for {currency}.") from exc

        self.cache.put_through(EXCHANGE_RATES, currency, rate)
        return rate

    def refresh(self, target_currency: str) -> ExchangeRate:
        """Drop the live entry and resolve again (scheduled refresh hook)."""
        self.cache.evict(EXCHANGE_RATES, (target_currency or "").strip().upper())
        return self.resolve(target_currency)

    def _fetch(self, currency: str) -> ExchangeRate:
        today = self._today()
        try:
            rate = self._from_primary(currency, today)
        except UpstreamError as exc:
            logger.warning("Primary exchange provider failed; trying cross rate",
                           extra={"currency": currency, "error": str(exc)})
            rate = None
        if rate is not None:
            return rate
        return self._from_secondary(currency, today)

    def _from_primary(self, currency: str, today: dt.date) -> Optional[ExchangeRate]:
        """First valid quote from today back through the lookback window."""
        for days_back in range(self.lookback_days + 1):
            search_date = today - dt.timedelta(days=days_back)
            quotes = self.primary.fetch_quotes(search_date)
            for quote in quotes:
                if quote.is_valid_for(currency):
                    logger.info("Resolved exchange rate from primary provider",
                                extra={"currency": currency, "as_of_date": search_date.isoformat()})
                    return quote.to_exchange_rate(search_date)
            logger.debug("No valid quote for date", extra={"currency": currency, "date": search_date.isoformat()})
        logger.info("No valid primary quote within lookback window",
                    extra={"currency": currency, "lookback_days": self.lookback_days})
        return None

    def _from_secondary(self, currency: str, today: dt.date) -> ExchangeRate:
        target_per_home = self.secondary.fetch_rate(self.home_currency, currency)
        if not target_per_home or not target_per_home > 0:
            raise UpstreamError(f"Non-positive cross rate for {currency}", provider="cross_rate")
        home_per_target = round_half_up(1.0 / target_per_home, 2)
        logger.info("Resolved exchange rate from cross-rate provider",
                    extra={"currency": currency, "rate": home_per_target})
        return ExchangeRate(
            currency=currency,
            base_rate=home_per_target,
            buy_rate=home_per_target,
            sell_rate=home_per_target,
            as_of_date=today,
        )
