"""
Configuration Management Module

This module handles loading, validating, and providing access to application configuration
from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Every default reproduces the built-in behaviour (URLs, field names, TTL, interval)
- Upstream field mappings are settings, since the primary price payload is not documented
- Splits the dotted rate path into a list of keys

Usage:
    from core.config import settings

    print(settings.rate_url)
    print(settings.rate_path_list)  # ['Valute', 'USD', 'Value']
"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """
    Application Settings

    Values are automatically loaded from environment variables or .env file.

    Attributes:
        rate_url: USD/RUB exchange rate endpoint
        rate_json_path: Dotted path to the numeric rate inside the rate payload
        primary_price_url: Primary BTC price endpoint
        primary_price_field: Price field of the primary payload
        primary_volume_field: Volume field of the primary payload
        fallback_price_url: Secondary BTC price endpoint
        fallback_price_field: Price field of the secondary payload
        fallback_volume_field: Volume field of the secondary payload
        cache_file: JSON file backing the local key-value store
        cache_key: Key under which the cached rate is stored
        rate_cache_ttl_seconds: Rate cache time-to-live
        default_usd_rub_rate: Rate used when neither network nor cache can help
        refresh_interval_seconds: Period of the refresh timer
        request_timeout: Total timeout for a single HTTP request in seconds
        app_host: Host address for FastAPI server
        app_port: Port number for FastAPI server
        log_level: Logging level
    """

    # ============================================
    # Exchange Rate Source
    # ============================================

    rate_url: str = Field(
        default="https://www.cbr-xml-daily.ru/daily_json.js",
        description="USD/RUB exchange rate endpoint"
    )

    rate_json_path: str = Field(
        default="Valute.USD.Value",
        description="Dotted path to the USD/RUB rate in the response body"
    )

    # ============================================
    # Price Sources
    # ============================================

    primary_price_url: str = Field(
        default="https://luky3.jinr.ru/bitcoin.json",
        description="Primary BTC price/volume endpoint"
    )

    # The primary payload shape is unconfirmed; these names are a best guess.
    primary_price_field: str = Field(
        default="last",
        description="Field of the primary payload holding the USD price"
    )

    primary_volume_field: str = Field(
        default="total_fees",
        description="Field of the primary payload holding the BTC volume"
    )

    fallback_price_url: str = Field(
        default="https://api.blockchain.info/stats",
        description="Secondary BTC price/volume endpoint"
    )

    fallback_price_field: str = Field(
        default="market_price_usd",
        description="Field of the secondary payload holding the USD price"
    )

    fallback_volume_field: str = Field(
        default="trade_volume_btc",
        description="Field of the secondary payload holding the BTC volume"
    )

    # ============================================
    # Caching Configuration
    # ============================================

    cache_file: str = Field(
        default=".cache/local_storage.json",
        description="JSON file used as persistent key-value storage"
    )

    cache_key: str = Field(
        default="usdRubRateCache",
        description="Storage key of the cached USD/RUB rate"
    )

    rate_cache_ttl_seconds: int = Field(
        default=3600,
        description="USD/RUB rate cache TTL in seconds (1 hour)"
    )

    default_usd_rub_rate: float = Field(
        default=90.0,
        description="Rate returned when the endpoint fails and nothing is cached"
    )

    # ============================================
    # Refresh Cycle
    # ============================================

    refresh_interval_seconds: int = Field(
        default=60,
        description="Seconds between refresh cycles"
    )

    request_timeout: int = Field(
        default=10,
        description="HTTP request timeout in seconds"
    )

    # ============================================
    # Application Configuration
    # ============================================

    app_host: str = Field(
        default="0.0.0.0",
        description="FastAPI server host address"
    )

    app_port: int = Field(
        default=8000,
        description="FastAPI server port"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # ============================================
    # Pydantic Settings Configuration
    # ============================================

    model_config = SettingsConfigDict(
        # Look for .env file in the project root
        env_file=".env",
        # Ignore extra fields in .env that aren't defined here
        extra="ignore",
        # Case-insensitive environment variable matching
        case_sensitive=False
    )

    # ============================================
    # Derived Properties
    # ============================================

    @property
    def rate_path_list(self) -> List[str]:
        """
        Split the dotted rate path into its keys.

        Example:
            >>> settings.rate_path_list
            ['Valute', 'USD', 'Value']
        """
        return [part.strip() for part in self.rate_json_path.split(".") if part.strip()]

    @property
    def rate_cache_ttl_ms(self) -> int:
        """Rate cache TTL in milliseconds, the unit cached timestamps use."""
        return self.rate_cache_ttl_seconds * 1000


# ============================================
# Global Settings Instance
# ============================================

# Create a single instance of settings to be imported throughout the application
settings = Settings()


# ============================================
# Configuration Validation
# ============================================

def validate_configuration() -> None:
    """
    Validate critical configuration settings on application startup.

    Raises:
        ValueError: If required configuration is missing or invalid
    """
    # Import logger here to avoid circular import
    # (logging.py imports config.py, so we can't import at module level)
    from core.logging import logger

    if not settings.rate_path_list:
        raise ValueError("RATE_JSON_PATH must contain at least one key")

    if settings.rate_cache_ttl_seconds <= 0:
        raise ValueError(
            f"Invalid RATE_CACHE_TTL_SECONDS: {settings.rate_cache_ttl_seconds}. Must be positive"
        )

    if settings.refresh_interval_seconds <= 0:
        raise ValueError(
            f"Invalid REFRESH_INTERVAL_SECONDS: {settings.refresh_interval_seconds}. Must be positive"
        )

    if settings.default_usd_rub_rate <= 0:
        raise ValueError(
            f"Invalid DEFAULT_USD_RUB_RATE: {settings.default_usd_rub_rate}. Must be positive"
        )

    # Validate port number
    if not (1 <= settings.app_port <= 65535):
        raise ValueError(f"Invalid port number: {settings.app_port}. Must be between 1 and 65535")

    # Validate log level
    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if settings.log_level.upper() not in valid_log_levels:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{settings.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    # Log successful validation
    logger.info("Configuration validated successfully")
    logger.info(f"Rate source: {settings.rate_url} ({settings.rate_json_path})")
    logger.info(f"Price sources: {settings.primary_price_url} -> {settings.fallback_price_url}")
    logger.info(f"Rate cache: {settings.cache_file} [{settings.cache_key}], TTL {settings.rate_cache_ttl_seconds}s")
    logger.info(f"Refresh interval: {settings.refresh_interval_seconds}s")
    logger.info(f"Server: {settings.app_host}:{settings.app_port}")
    logger.info(f"Log level: {settings.log_level.upper()}")
