"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Pipeline settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # External geocoding service
    geocoding_base_url: str = "https://api.mapbox.com/geocoding/v5/mapbox.places"
    geocoding_access_token: str = ""

    # Timeouts (milliseconds)
    geocode_timeout_ms: int = 4000

    # Circuit breaker
    geocode_breaker_failures: int = 5
    geocode_breaker_window_sec: int = 60
    geocode_breaker_half_open_sec: int = 30

    # Cache TTL (seconds)
    geocode_cache_ttl_seconds: int = 3600

    # Global last-resort point
    fallback_city_name: str = "Tel Aviv"
    fallback_city_lat: float = 32.0853
    fallback_city_lng: float = 34.7818

    # Synthetic ring around a city center
    fallback_ring_radius_km: float = 3.0
    fallback_ring_min_points: int = 20

    # Jitter spans (degrees, full width)
    city_jitter_deg: float = 0.01
    ring_jitter_deg: float = 0.005

    # Route styling
    route_line_color: str = "#4f46e5"
    route_line_width: int = 4
    route_line_opacity: float = 0.7


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
