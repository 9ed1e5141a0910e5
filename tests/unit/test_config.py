"""Unit tests for Settings."""

import pytest

from sprintlens.config import (
    DEFAULT_DB_PATH,
    DEFAULT_EMAIL_API_URL,
    DEFAULT_EMAIL_FROM,
    DEFAULT_LOG_LEVEL,
    ConfigError,
    Settings,
)


@pytest.mark.unit
class TestSettingsFromEnv:
    """Tests for Settings.from_env."""

    def test_defaults(self) -> None:
        """An empty environment yields the defaults."""
        settings = Settings.from_env({})

        assert settings == Settings()
        assert settings.db_path == DEFAULT_DB_PATH
        assert settings.email_api_key == ""
        assert settings.email_from == DEFAULT_EMAIL_FROM
        assert settings.email_api_url == DEFAULT_EMAIL_API_URL
        assert settings.log_dir is None
        assert settings.log_level == DEFAULT_LOG_LEVEL

    def test_reads_environment(self) -> None:
        """All values can be overridden."""
        settings = Settings.from_env(
            {
                "SPRINTLENS_DB_PATH": "/var/lib/sprintlens/db.sqlite",
                "RESEND_API_KEY": " re_key ",
                "SPRINTLENS_EMAIL_FROM": "team@example.com",
                "SPRINTLENS_EMAIL_API_URL": "http://localhost:8025/",
                "SPRINTLENS_LOG_DIR": "/var/log/sprintlens",
                "SPRINTLENS_LOG_LEVEL": "debug",
            }
        )

        assert settings.db_path == "/var/lib/sprintlens/db.sqlite"
        assert settings.email_api_key == "re_key"
        assert settings.email_from == "team@example.com"
        assert settings.email_api_url == "http://localhost:8025"
        assert settings.log_dir == "/var/log/sprintlens"
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize(
        "environ",
        [
            {"SPRINTLENS_DB_PATH": "  "},
            {"SPRINTLENS_EMAIL_FROM": "not-an-email"},
            {"SPRINTLENS_EMAIL_API_URL": "ftp://mail.example.com"},
            {"SPRINTLENS_LOG_LEVEL": "LOUD"},
        ],
    )
    def test_invalid_values(self, environ: dict) -> None:
        """Invalid values raise ConfigError."""
        with pytest.raises(ConfigError):
            Settings.from_env(environ)

    def test_settings_are_frozen(self) -> None:
        """Settings can't be mutated after creation."""
        settings = Settings()

        with pytest.raises(AttributeError):
            settings.db_path = "other.db"  # type: ignore[misc]
