"""
Unit Tests for Configuration Module

These tests verify that the configuration system works correctly:
- Defaults reproduce the built-in URLs, field mappings and timings
- Property methods derive the values other modules need
- Validation catches invalid configurations

Run with:
    pytest tests/unit/test_config.py -v
"""

import pytest

import core.config
from core.config import Settings, settings, validate_configuration


class TestDefaults:
    """Test the default configuration values"""

    def test_source_urls_are_https(self):
        """All upstream endpoints use HTTPS"""
        cfg = Settings()
        for url in (cfg.rate_url, cfg.primary_price_url, cfg.fallback_price_url):
            assert url.startswith("https://")

    def test_fallback_field_mapping(self):
        """The secondary price source maps blockchain.info stats fields"""
        cfg = Settings()
        assert cfg.fallback_price_field == "market_price_usd"
        assert cfg.fallback_volume_field == "trade_volume_btc"

    def test_timings(self):
        """One-minute refresh, one-hour rate cache, default rate 90"""
        cfg = Settings()
        assert cfg.refresh_interval_seconds == 60
        assert cfg.rate_cache_ttl_seconds == 3600
        assert cfg.default_usd_rub_rate == 90
        assert cfg.cache_key == "usdRubRateCache"

    def test_environment_overrides(self, monkeypatch):
        """Settings are read from environment variables, case-insensitively"""
        monkeypatch.setenv("PRIMARY_PRICE_FIELD", "price")
        monkeypatch.setenv("refresh_interval_seconds", "15")

        cfg = Settings()

        assert cfg.primary_price_field == "price"
        assert cfg.refresh_interval_seconds == 15


class TestDerivedProperties:
    """Test the computed properties"""

    def test_rate_path_list(self):
        assert Settings().rate_path_list == ["Valute", "USD", "Value"]

    def test_rate_path_list_ignores_blanks(self):
        assert Settings(rate_json_path=" Valute . USD..Value ").rate_path_list == ["Valute", "USD", "Value"]

    def test_rate_cache_ttl_ms(self):
        assert Settings(rate_cache_ttl_seconds=120).rate_cache_ttl_ms == 120_000


class TestValidateConfiguration:
    """Test validate_configuration()"""

    def test_default_configuration_is_valid(self, monkeypatch):
        monkeypatch.setattr(core.config, "settings", Settings())
        validate_configuration()

    @pytest.mark.parametrize("overrides", [
        {"rate_json_path": "..."},
        {"rate_cache_ttl_seconds": 0},
        {"refresh_interval_seconds": -5},
        {"default_usd_rub_rate": 0},
        {"app_port": 70000},
        {"log_level": "VERBOSE"},
    ])
    def test_invalid_values_are_rejected(self, monkeypatch, overrides):
        monkeypatch.setattr(core.config, "settings", Settings(**overrides))
        with pytest.raises(ValueError):
            validate_configuration()

    def test_global_settings_instance(self):
        assert isinstance(settings, Settings)
