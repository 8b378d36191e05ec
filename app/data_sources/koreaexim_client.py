"""Korea Eximbank daily exchange-rate quotes (primary provider)."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import List, Optional

from app.data_sources.resilient_fetcher import ResilientFetcher
from app.errors import UpstreamError
from app.models import ExchangeRate
from utils.logging_utils import get_tagged_logger
from utils.number_utils import parse_rate

logger = get_tagged_logger(__name__, tag="koreaexim_client")

PROVIDER = "koreaexim"
SEARCH_DATE_FORMAT = "%Y%m%d"
VALID_RESULT = 1


@dataclass
class RateQuote:
    """One row of the AP01 response; rates are raw strings like "1,234.5"."""
    result: Optional[int]
    currency_unit: str
    deal_base_rate: Optional[str]
    buy_rate: Optional[str]
    sell_rate: Optional[str]

    def is_valid_for(self, currency: str) -> bool:
        return self.result == VALID_RESULT and self.currency_unit == currency

    def to_exchange_rate(self, as_of_date: dt.date) -> ExchangeRate:
        try:
            return ExchangeRate(
                currency=self.currency_unit,
                base_rate=parse_rate(self.deal_base_rate),
                buy_rate=parse_rate(self.buy_rate),
                sell_rate=parse_rate(self.sell_rate),
                as_of_date=as_of_date,
            )
        except ValueError as exc:
            raise UpstreamError(f"Unparseable {self.currency_unit} quote", provider=PROVIDER) from exc


def _to_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class KoreaEximClient:
    """Fetch all quotes published for a given date."""

    def __init__(self, fetcher: ResilientFetcher, *, api_url: str, api_key: Optional[str]) -> None:
        self.fetcher = fetcher
        self.api_url = api_url
        self.api_key = api_key

    def fetch_quotes(self, search_date: dt.date) -> List[RateQuote]:
        """Return the quotes for `search_date`; empty on non-business days."""
        params = {
            "authkey": self.api_key or "",
            "searchdate": search_date.strftime(SEARCH_DATE_FORMAT),
            "data": "AP01",
        }
        data = self.fetcher.get_json(self.api_url, params, provider=PROVIDER)
        if not isinstance(data, list):
            logger.warning("Unexpected exchange payload shape; treating as no quotes",
                           extra={"search_date": params["searchdate"], "type": type(data).__name__})
            return []

        quotes: List[RateQuote] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            quotes.append(
                RateQuote(
                    result=_to_int(item.get("result")),
                    currency_unit=(item.get("cur_unit") or "").strip(),
                    deal_base_rate=item.get("deal_bas_r"),
                    buy_rate=item.get("ttb"),
                    sell_rate=item.get("tts"),
                )
            )
        logger.debug("Fetched exchange quotes", extra={"search_date": params["searchdate"], "count": len(quotes)})
        return quotes
