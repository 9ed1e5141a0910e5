"""Centralized logging configuration for SprintLens.

All components log through children of the ``sprintlens`` logger; the API
configures it once at startup from ``Settings``.
"""

from __future__ import annotations

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_FILE = "sprintlens.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_SENSITIVE_PATTERNS = [
    (r"re_[a-zA-Z0-9_]{16,}", "[RESEND_KEY]"),  # Resend API keys
    (r"Bearer [a-zA-Z0-9._-]+", "Bearer [REDACTED]"),
    (r"(api_key|token)=[a-zA-Z0-9._-]+", r"\1=[REDACTED]"),
]


def setup_logging(
    log_dir: str | Path | None = None,
    level: str = "INFO",
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    console: bool = True,
) -> logging.Logger:
    """Configure the ``sprintlens`` logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        log_dir: Directory for a rotating log file. None disables file logging.
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Log file name inside log_dir.
        max_bytes: Maximum size per log file before rotation.
        backup_count: Number of rotated files to keep.
        console: Whether to also log to stderr.

    Returns:
        The sprintlens logger.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("sprintlens")
    logger.setLevel(log_level)

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = []

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_path / log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        )
    if console:
        handlers.append(logging.StreamHandler())

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging configured (level=%s, dir=%s)", level, log_dir)
    return logger


def truncate_output(output: str, max_length: int = 5000) -> str:
    """Truncate long output for logging or persistence.

    Args:
        output: The output string to truncate.
        max_length: Maximum length before truncation.

    Returns:
        Truncated string with indicator if truncated.
    """
    if len(output) <= max_length:
        return output
    return output[:max_length] + f"\n... [truncated, {len(output) - max_length} more chars]"


def sanitize_for_log(text: str) -> str:
    """Remove credentials from text before it is logged or stored."""
    result = text
    for pat, replacement in _SENSITIVE_PATTERNS:
        result = re.sub(pat, replacement, result)
    return result
