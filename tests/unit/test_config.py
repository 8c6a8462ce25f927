"""
Tests for the configuration module.
"""

from pathlib import Path

import pytest


class TestSettings:
    """Tests for Settings class."""

    def test_defaults_need_no_environment(self):
        """The service starts with no variables set."""
        from config.settings import Settings

        settings = Settings(_env_file=None)

        assert settings.host == "0.0.0.0"
        assert settings.port == 8080
        assert settings.catalog_ttl_seconds == 300.0
        assert settings.search_default_limit == 24
        assert settings.price_tie_threshold == 5.0
        assert settings.tier_uniform_range_threshold == 30

    def test_is_development_property(self):
        """Test is_development property."""
        from config.settings import Settings

        for env in ["development", "dev", "local"]:
            assert Settings(_env_file=None, environment=env).is_development is True

        assert Settings(_env_file=None, environment="production").is_development is False

    def test_is_production_property(self):
        """Test is_production property."""
        from config.settings import Settings

        for env in ["production", "prod"]:
            assert Settings(_env_file=None, environment=env).is_production is True

        assert Settings(_env_file=None, environment="development").is_production is False

    def test_cors_origins_parsing(self):
        """CORS origins can be given as a comma-separated string."""
        from config.settings import Settings

        settings = Settings(
            _env_file=None,
            cors_origins="http://localhost:3000, http://localhost:5173",
        )

        assert settings.cors_origins == ["http://localhost:3000", "http://localhost:5173"]

    def test_catalog_path_parsing(self):
        """Blank catalog paths mean "use the generated catalog"."""
        from config.settings import Settings

        assert Settings(_env_file=None, catalog_path="").catalog_path is None
        assert Settings(_env_file=None, catalog_path="data/catalog.json").catalog_path == Path("data/catalog.json")

    def test_catalog_ttl_from_env(self, monkeypatch):
        """Environment variables override defaults."""
        from config.settings import Settings

        monkeypatch.setenv("CATALOG_TTL_SECONDS", "42")
        monkeypatch.setenv("PRICE_TIE_THRESHOLD", "2.5")

        settings = Settings(_env_file=None)

        assert settings.catalog_ttl_seconds == 42.0
        assert settings.price_tie_threshold == 2.5


class TestGetSettings:
    """Tests for the settings accessors."""

    def test_get_settings_is_cached(self):
        """get_settings returns the same instance."""
        from config.settings import get_settings

        assert get_settings() is get_settings()

    def test_get_settings_for_testing(self):
        """Testing settings disable the assistant and accept overrides."""
        from config.settings import get_settings_for_testing

        settings = get_settings_for_testing(search_default_limit=5)

        assert settings.environment == "testing"
        assert settings.assistant_enabled is False
        assert settings.openai_api_key == ""
        assert settings.search_default_limit == 5

    def test_get_settings_for_testing_is_not_cached(self):
        from config.settings import get_settings_for_testing

        assert get_settings_for_testing() is not get_settings_for_testing()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
