"""Outbound GET with per-attempt timeouts, bounded retry and failure classification."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

import requests
from tenacity import RetryCallState, Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from app.errors import UpstreamError
from utils.logging_utils import get_tagged_logger, mask_params

logger = get_tagged_logger(__name__, tag="resilient_fetcher")


def is_retryable_error(exc: BaseException) -> bool:
    """HTTP 429, HTTP 5xx, connection failures and timeouts are retryable."""
    if isinstance(exc, requests.HTTPError):
        status = exc.response.status_code if exc.response is not None else None
        return status is not None and (status == 429 or 500 <= status < 600)
    return isinstance(exc, (requests.ConnectionError, requests.Timeout))


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff shared by every provider client."""
    max_retries: int = 2
    initial_backoff: float = 0.3
    max_backoff: float = 2.0
    retry_on: Callable[[BaseException], bool] = field(default=is_retryable_error)

    def retrying(self, *, sleep: Callable[[float], None], before_sleep=None) -> Retrying:
        """Build a tenacity controller: waits of min(initial * 2**n, max) between attempts."""
        return Retrying(
            retry=retry_if_exception(self.retry_on),
            wait=wait_exponential(multiplier=self.initial_backoff, max=self.max_backoff),
            stop=stop_after_attempt(self.max_retries + 1),
            sleep=sleep,
            before_sleep=before_sleep,
            reraise=True,
        )


class ResilientFetcher:
    """Wrap a requests session so every call has the same timeout/retry behaviour.

    Any `requests` failure that survives the retry policy is translated into
    `UpstreamError`, so raw transport exceptions never reach the resolvers.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        connect_timeout: float = 3.0,
        read_timeout: float = 5.0,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = (connect_timeout, read_timeout)
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings, session: Optional[requests.Session] = None) -> "ResilientFetcher":
        """Build a fetcher from millisecond-based settings."""
        policy = RetryPolicy(
            max_retries=settings.retry_max_retries,
            initial_backoff=settings.retry_initial_backoff_ms / 1000.0,
            max_backoff=settings.retry_max_backoff_ms / 1000.0,
        )
        return cls(
            session,
            connect_timeout=settings.connect_timeout_ms / 1000.0,
            read_timeout=settings.response_timeout_ms / 1000.0,
            retry_policy=policy,
        )

    def _get(self, url: str, params: Optional[Mapping[str, Any]]) -> Any:
        resp = self.session.get(url, params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def get_json(self, url: str, params: Optional[Mapping[str, Any]] = None, *, provider: str) -> Any:
        """GET `url` and return the decoded JSON body."""

        def log_retry(state: RetryCallState) -> None:
            logger.warning(
                "Retrying provider call",
                extra={
                    "provider": provider,
                    "url": url,
                    "params": mask_params(params),
                    "retry": state.attempt_number,
                    "delay_s": state.next_action.sleep if state.next_action else None,
                    "error": type(state.outcome.exception()).__name__,
                },
            )

        retrying = self.retry_policy.retrying(sleep=self._sleep, before_sleep=log_retry)
        try:
            return retrying(self._get, url, params)
        except requests.RequestException as exc:
            status = None
            if isinstance(exc, requests.HTTPError) and exc.response is not None:
                status = exc.response.status_code
            logger.error(
                "Provider call failed",
                extra={"provider": provider, "url": url, "status": status, "error": type(exc).__name__},
            )
            raise UpstreamError(
                f"{provider} request failed: {type(exc).__name__}",
                provider=provider,
                status_code=status,
            ) from exc
