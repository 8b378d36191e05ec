"""Application configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the travel data core."""
    model_config = SettingsConfigDict(env_prefix="TRAVEL_", extra="ignore")

    # Exchange rates: Korea Eximbank primary, open.er-api cross-rate fallback
    exchange_api_url: str = "https://oapi.koreaexim.go.kr/site/program/financial/exchangeJSON"
    exchange_api_key: str | None = None
    exchange_fallback_url: str = "https://open.er-api.com/v6/latest"
    home_currency: str = "KRW"
    target_currency: str = "TWD"
    home_timezone: str = "Asia/Seoul"
    exchange_lookback_days: int = 3

    # Weather: OpenWeather current + 5 day / 3 hour forecast
    weather_api_url: str = "https://api.openweathermap.org/data/2.5/weather"
    weather_forecast_url: str = "https://api.openweathermap.org/data/2.5/forecast"
    weather_api_key: str | None = None
    weather_icon_url_template: str = "https://openweathermap.org/img/wn/{icon}@2x.png"

    # Fixed location served by the weather resolvers and used as the spot search origin default
    location_name: str = "taipei"
    location_latitude: float = 25.0330
    location_longitude: float = 121.5654
    location_timezone: str = "Asia/Taipei"

    # Places
    places_api_url: str = "https://maps.googleapis.com/maps/api/place"
    places_api_key: str | None = None
    spot_default_radius_m: int = 5000
    provider_language: str = "ko"

    # Outbound HTTP
    connect_timeout_ms: int = 3000
    response_timeout_ms: int = 5000
    retry_max_retries: int = 2
    retry_initial_backoff_ms: int = 300
    retry_max_backoff_ms: int = 2000

    # Cache
    cache_redis_url: str | None = None
    cache_key_prefix: str = "travel:"
    exchange_live_ttl_seconds: int = 25 * 3600
    exchange_backup_ttl_seconds: int = 7 * 24 * 3600
    weather_live_ttl_seconds: int = 30 * 60
    weather_backup_ttl_seconds: int = 6 * 3600
    forecast_ttl_seconds: int = 3600
    spots_ttl_seconds: int = 10 * 60
    spot_details_ttl_seconds: int = 30 * 60

    @field_validator(
        "exchange_api_url",
        "exchange_fallback_url",
        "weather_api_url",
        "weather_forecast_url",
        "places_api_url",
        mode="after",
    )
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("home_currency", "target_currency", mode="after")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        """Currency codes are compared upper-case everywhere."""
        return v.strip().upper()


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")
