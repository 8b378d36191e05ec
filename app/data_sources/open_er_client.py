"""open.er-api.com latest rates (secondary, cross-rate provider)."""
from __future__ import annotations

from app.data_sources.resilient_fetcher import ResilientFetcher
from app.errors import UpstreamError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="open_er_client")

PROVIDER = "open_er_api"


class OpenErClient:
    """Rates quoted relative to a base currency, without buy/sell spread."""

    def __init__(self, fetcher: ResilientFetcher, *, api_url: str) -> None:
        self.fetcher = fetcher
        self.api_url = api_url

    def fetch_rate(self, base_currency: str, target_currency: str) -> float:
        """Return units of `target_currency` per one `base_currency`; always > 0."""
        data = self.fetcher.get_json(f"{self.api_url}/{base_currency}", provider=PROVIDER)
        if not isinstance(data, dict) or data.get("result") != "success":
            raise UpstreamError("Cross-rate provider reported failure", provider=PROVIDER)
        raw = (data.get("rates") or {}).get(target_currency)
        try:
            rate = float(raw)
        except (TypeError, ValueError):
            raise UpstreamError(f"No {target_currency} rate in cross-rate payload", provider=PROVIDER) from None
        if not rate > 0:
            raise UpstreamError(f"Non-positive {target_currency} cross rate: {rate}", provider=PROVIDER)
        logger.info("Fetched cross rate", extra={"base": base_currency, "target": target_currency, "rate": rate})
        return rate
