"""Tests for configuration settings."""

import pytest

from tagledger.config import Settings


class TestSettings:
    """Tests for Settings class."""

    def test_default_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default configuration values."""
        for name in ("DEBUG", "PORT", "RATE_LIMIT", "DEFAULT_LOCATION_ID", "QUARANTINE_CAPACITY"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setattr(
            "tagledger.config.Settings.model_config",
            {"env_file": None, "case_sensitive": False, "extra": "ignore"},
        )
        settings = Settings()

        assert settings.debug is False
        assert settings.port == 8080
        assert settings.rate_limit == "600/minute"
        assert settings.max_body_bytes == 512 * 1024
        assert settings.quarantine_capacity == 200
        assert settings.default_location_id == "LOC-A1"
        assert settings.disposal_location_id == "LOC-TRASH"
        assert settings.seed_demo_data is True

    def test_custom_settings(self) -> None:
        """Test creating settings with custom values."""
        settings = Settings(
            port=9999,
            debug=True,
            quarantine_capacity=5,
            default_location_id="LOC-R1",
            mission_id="ARTEMIS-III",
        )

        assert settings.port == 9999
        assert settings.debug is True
        assert settings.quarantine_capacity == 5
        assert settings.default_location_id == "LOC-R1"
        assert settings.mission_id == "ARTEMIS-III"

    def test_settings_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test loading settings from environment variables."""
        monkeypatch.setenv("PORT", "7777")
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.setenv("SEED_DEMO_DATA", "false")
        monkeypatch.setenv("RATE_LIMIT", "10/second")

        settings = Settings()

        assert settings.port == 7777
        assert settings.debug is True
        assert settings.seed_demo_data is False
        assert settings.rate_limit == "10/second"

    def test_settings_case_insensitive(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that environment variable names are case-insensitive."""
        monkeypatch.setenv("default_location_id", "LOC-C1")
        monkeypatch.setenv("ORGANIZATION", "Ground Control")

        settings = Settings()

        assert settings.default_location_id == "LOC-C1"
        assert settings.organization == "Ground Control"

    def test_cors_origin_list(self) -> None:
        settings = Settings(cors_origins=" http://a.test ,http://b.test,, ")
        assert settings.cors_origin_list == ["http://a.test", "http://b.test"]

    def test_badge_tag_list(self) -> None:
        assert Settings(badge_tags="").badge_tag_list == []
        assert Settings(badge_tags="BADGE-1, 0004726482").badge_tag_list == ["BADGE-1", "0004726482"]

    def test_effective_log_level(self) -> None:
        assert Settings(debug=False, log_level="warning").effective_log_level == "WARNING"
        assert Settings(debug=True, log_level="warning").effective_log_level == "DEBUG"
