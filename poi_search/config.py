"""Centralized configuration using Pydantic Settings.

This module is the single source of truth for tunables: HTTP timeouts,
provider credentials, geocoding limits, search behaviour and logging.

Configuration can be overridden via environment variables:
- POI_PROVIDER_DEFAULT=geoapify
- POI_PROVIDER_GEOAPIFY_API_KEY=...
- POI_SEARCH_DEBOUNCE_SECONDS=0.5
- POI_SEARCH_DEFAULT_LOCATION="Pasadena, CA"
- POI_LOG_LEVEL=DEBUG
- etc.

Values from the environment only seed the preference store; runtime
changes go through the store, not through this module.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain.models import ProviderSelection


class HttpConfig(BaseSettings):
    """HTTP client configuration shared by all place-search adapters.

    Environment variables prefixed with POI_HTTP_.
    """

    model_config = SettingsConfigDict(env_prefix="POI_HTTP_")

    connect_timeout_seconds: float = 5.0
    request_timeout_seconds: float = 10.0
    user_agent: str = "poi-search/0.1"


class ProvidersConfig(BaseSettings):
    """Backend selection and credentials.

    Environment variables prefixed with POI_PROVIDER_.
    """

    model_config = SettingsConfigDict(env_prefix="POI_PROVIDER_")

    default: ProviderSelection = ProviderSelection.GOOGLE_PLACES
    google_api_key: Optional[str] = None
    geoapify_api_key: Optional[str] = None
    here_api_key: Optional[str] = None
    result_limit: int = Field(default=30, ge=1, le=100)

    def api_key_for(self, selection: ProviderSelection) -> Optional[str]:
        """Return the configured key for a backend, if any."""
        return {
            ProviderSelection.GOOGLE_PLACES: self.google_api_key,
            ProviderSelection.GEOAPIFY: self.geoapify_api_key,
            ProviderSelection.HERE: self.here_api_key,
        }[selection]


class GeocodingConfig(BaseSettings):
    """Geocoding configuration.

    Environment variables prefixed with POI_GEO_.
    """

    model_config = SettingsConfigDict(env_prefix="POI_GEO_")

    timeout_seconds: int = 10
    rate_limit_delay: float = 0.0
    max_retries: int = 2
    error_wait_seconds: float = 2.0
    cache_ttl_seconds: float = 3600.0
    cache_max_size: int = 256


class SearchConfig(BaseSettings):
    """Search behaviour defaults.

    Environment variables prefixed with POI_SEARCH_.
    """

    model_config = SettingsConfigDict(env_prefix="POI_SEARCH_")

    debounce_seconds: float = Field(default=0.3, ge=0.0)
    default_radius_miles: int = Field(default=10, ge=1)
    use_device_location: bool = True
    default_location: Optional[str] = None
    open_now: bool = False


class ObservabilityConfig(BaseSettings):
    """Logging and observability configuration.

    Environment variables prefixed with POI_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="POI_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = False  # Set True for JSON logging


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

        config = get_config()
        print(config.search.debounce_seconds)
        print(config.providers.default)

    Environment variables prefixed with POI_.
    """

    model_config = SettingsConfigDict(env_prefix="POI_")

    http: HttpConfig = Field(default_factory=HttpConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    geocoding: GeocodingConfig = Field(default_factory=GeocodingConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Returns:
        The application configuration instance.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache.

    Call this in tests to ensure a fresh configuration is loaded.
    """
    get_config.cache_clear()
