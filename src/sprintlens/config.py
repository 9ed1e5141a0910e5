"""Runtime configuration for SprintLens, read from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_DB_PATH = "sprintlens.db"
DEFAULT_EMAIL_FROM = "reports@sprintlens.local"
DEFAULT_EMAIL_API_URL = "https://api.resend.com"
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when configuration is invalid."""


@dataclass(frozen=True)
class Settings:
    """Application settings.

    Attributes:
        db_path: SQLite database file (":memory:" for an in-memory store).
        email_api_key: Resend API key. Empty means emails are only logged.
        email_from: Sender address for report emails.
        email_api_url: Base URL of the email HTTP API.
        log_dir: Directory for rotating log files. None logs to the console only.
        log_level: Level of the sprintlens logger.
    """

    db_path: str = DEFAULT_DB_PATH
    email_api_key: str = ""
    email_from: str = DEFAULT_EMAIL_FROM
    email_api_url: str = DEFAULT_EMAIL_API_URL
    log_dir: str | None = None
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Parsed settings.

        Raises:
            ConfigError: If a value is present but invalid.
        """
        env = os.environ if environ is None else environ

        db_path = env.get("SPRINTLENS_DB_PATH", DEFAULT_DB_PATH).strip()
        if not db_path:
            raise ConfigError("SPRINTLENS_DB_PATH must not be empty")

        email_from = env.get("SPRINTLENS_EMAIL_FROM", DEFAULT_EMAIL_FROM).strip()
        if "@" not in email_from:
            raise ConfigError(f"SPRINTLENS_EMAIL_FROM is not an email address: {email_from!r}")

        api_url = env.get("SPRINTLENS_EMAIL_API_URL", DEFAULT_EMAIL_API_URL).strip()
        if not api_url.startswith(("http://", "https://")):
            raise ConfigError(f"SPRINTLENS_EMAIL_API_URL must be an http(s) URL: {api_url!r}")

        log_level = env.get("SPRINTLENS_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(f"SPRINTLENS_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")

        return cls(
            db_path=db_path,
            email_api_key=env.get("RESEND_API_KEY", "").strip(),
            email_from=email_from,
            email_api_url=api_url.rstrip("/"),
            log_dir=env.get("SPRINTLENS_LOG_DIR", "").strip() or None,
            log_level=log_level,
        )
