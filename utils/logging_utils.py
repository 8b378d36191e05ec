"""
Central logging configuration utilities.

Usage
-----
In your entrypoint (worker, cache-warm job, REST process, etc.):

    from utils.logging_utils import setup_logging

    def main() -> None:
        setup_logging(level="INFO", job_name="exchange_refresh")
        ...

In a module:

    from utils.logging_utils import get_tagged_logger

    logger = get_tagged_logger(__name__, tag="openweather_client")

    def fetch_current() -> None:
        logger.info("Fetching current weather")

Every record carries `job_name` and `tag` so provider, cache and resolver
logs can be told apart when several workers share one sink.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any, Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse


# ---------------------------------------------------------------------------
# Minimal bootstrap config (early logs)
# ---------------------------------------------------------------------------

BOOTSTRAP_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
BOOTSTRAP_DATEFMT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(
    level=logging.INFO,
    format=BOOTSTRAP_FORMAT,
    datefmt=BOOTSTRAP_DATEFMT,
)


# ---------------------------------------------------------------------------
# Defaults for full configuration
# ---------------------------------------------------------------------------

DEFAULT_LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(job_name)s | %(tag)s | %(name)s | %(message)s"
)
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Query parameter names that carry provider credentials.
SENSITIVE_QUERY_TOKENS = ("key", "appid", "secret", "token", "pass")

_CONFIGURED: bool = False


# ---------------------------------------------------------------------------
# Filters to enrich log records
# ---------------------------------------------------------------------------

class MaxLevelFilter(logging.Filter):
    """Allow only records up to (and including) `max_level`."""

    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        return record.levelno <= self.max_level


class EnsureTagFilter(logging.Filter):
    """
    Ensure every LogRecord has a `tag` attribute.

    Records coming from plain loggers (requests, urllib3, redis) get the last
    segment of their logger name, e.g. "urllib3.connectionpool" -> "connectionpool".
    """

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "tag"):
            logger_name = getattr(record, "name", "")
            record.tag = logger_name.split(".")[-1] if logger_name else "-"
        return True


class JobNameFilter(logging.Filter):
    """Inject a `job_name` attribute into every LogRecord (defaults to "-")."""

    def __init__(self, job_name: Optional[str] = None) -> None:
        super().__init__()
        self._job_name = job_name or "-"

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "job_name"):
            record.job_name = self._job_name
        return True


# ---------------------------------------------------------------------------
# Config builder and setup function
# ---------------------------------------------------------------------------


def build_logging_config(
    *,
    level: str | int = "INFO",
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    job_name: Optional[str] = None,
) -> Mapping[str, Any]:
    """
    Build a dictConfig-style logging configuration.

    DEBUG/INFO go to stdout, WARNING and above to stderr, so retry and
    fallback warnings stand out in container logs.
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "ensure_tag": {"()": EnsureTagFilter},
            "job_name": {"()": JobNameFilter, "job_name": job_name},
            "stdout_max_info": {
                "()": MaxLevelFilter,
                "max_level": logging.INFO,
            },
        },
        "formatters": {
            "standard": {
                "format": log_format,
                "datefmt": date_format,
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "filters": ["ensure_tag", "job_name", "stdout_max_info"],
                "level": "DEBUG",
                "stream": "ext://sys.stdout",
            },
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "filters": ["ensure_tag", "job_name"],
                "level": "WARNING",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {
            "level": level,
            "handlers": ["stdout", "stderr"],
        },
    }


def setup_logging(
    *,
    level: str | int = "INFO",
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    job_name: Optional[str] = None,
    override_existing: bool = False,
) -> None:
    """
    Configure application-wide logging once per process.

    Parameters
    ----------
    level:
        Root logger level (e.g., "DEBUG", "INFO").
    log_format:
        Formatter pattern; the default includes job_name and tag.
    date_format:
        Timestamp format for `asctime`.
    job_name:
        Logical name for this process (e.g. "spot_api", "exchange_refresh").
    override_existing:
        If False (default), repeated calls are a no-op after the first.
    """
    global _CONFIGURED

    if _CONFIGURED and not override_existing:
        return

    config_dict = build_logging_config(
        level=level,
        log_format=log_format,
        date_format=date_format,
        job_name=job_name,
    )
    logging.config.dictConfig(config_dict)
    _CONFIGURED = True


# ---------------------------------------------------------------------------
# Logger helper
# ---------------------------------------------------------------------------


class TaggedLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges call-site `extra` fields with the adapter's tag."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**(kwargs.get("extra") or {}), **self.extra}
        return msg, kwargs


def get_tagged_logger(
    name: str,
    *,
    tag: Optional[str] = None,
) -> logging.LoggerAdapter:
    """
    Return a LoggerAdapter that always carries a `tag` field.

    If `tag` is omitted it defaults to the last segment of `name`.
    """
    base_logger = logging.getLogger(name)
    if tag is None:
        tag = name.split(".")[-1]
    return TaggedLoggerAdapter(base_logger, {"tag": tag})


def mask_url(url: str) -> str:
    """Return a copy of a provider URL with credential query parameters masked.

    Examples
    --------
    - https://api.openweathermap.org/data/2.5/weather?lat=1&appid=abc
      -> https://api.openweathermap.org/data/2.5/weather?lat=1&appid=%2A%2A%2A
    - https://open.er-api.com/v6/latest/KRW -> unchanged
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return url

    if not parsed.query:
        return url

    masked_pairs = []
    for key, value in parse_qsl(parsed.query, keep_blank_values=True):
        if any(token in key.lower() for token in SENSITIVE_QUERY_TOKENS):
            masked_pairs.append((key, "***"))
        else:
            masked_pairs.append((key, value))

    return urlunparse(parsed._replace(query=urlencode(masked_pairs)))


def mask_params(params: Mapping[str, Any] | None) -> dict:
    """Return a copy of request params with credential values replaced by ***."""
    if not params:
        return {}
    return {
        k: ("***" if any(token in k.lower() for token in SENSITIVE_QUERY_TOKENS) else v)
        for k, v in params.items()
    }
