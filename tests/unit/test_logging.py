"""Unit tests for SprintLens logging configuration."""

import logging
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from sprintlens.api.app import create_app
from sprintlens.config import Settings
from sprintlens.logging import sanitize_for_log, setup_logging, truncate_output


@pytest.fixture(autouse=True)
def reset_sprintlens_logger():
    """Detach handlers installed by a test so later tests start clean."""
    yield
    logger = logging.getLogger("sprintlens")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_console_only_by_default(self) -> None:
        """Without a directory only a stream handler is installed."""
        logger = setup_logging()

        assert logger.name == "sprintlens"
        assert logger.level == logging.INFO
        assert [type(h) for h in logger.handlers] == [logging.StreamHandler]

    def test_creates_log_file_in_nested_dir(self) -> None:
        """Missing log directories are created."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir) / "nested" / "logs"
            setup_logging(log_dir=log_dir, console=False)

            assert (log_dir / "sprintlens.log").exists()

    def test_component_loggers_share_file_and_format(self) -> None:
        """Child loggers write to the same file with name and level columns."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir, console=False)
            logging.getLogger("sprintlens.reports.generator").info("report built")
            logging.getLogger("sprintlens.mailer").warning("mail bounced")

            content = (Path(tmpdir) / "sprintlens.log").read_text()
            assert " | INFO     | sprintlens.reports.generator | report built" in content
            assert " | WARNING  | sprintlens.mailer | mail bounced" in content

    def test_level_filters_messages(self) -> None:
        """Messages below the configured level are dropped."""
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_logging(log_dir=tmpdir, level="WARNING", console=False)
            logger.info("should not appear")
            logger.warning("should appear")

            content = (Path(tmpdir) / "sprintlens.log").read_text()
            assert "should not appear" not in content
            assert "should appear" in content

    def test_no_duplicate_handlers(self) -> None:
        """Repeated setup replaces handlers instead of stacking them."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir, console=False)
            logger = setup_logging(log_dir=tmpdir, console=True)

            assert len(logger.handlers) == 2

    def test_rotation_configured(self) -> None:
        """The file handler rotates at the configured size."""
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_logging(log_dir=tmpdir, max_bytes=500, backup_count=2, console=False)
            for i in range(50):
                logger.info("Rotation test message number %d with padding data", i)

            assert logger.handlers[0].maxBytes == 500
            assert (Path(tmpdir) / "sprintlens.log.1").exists()


@pytest.mark.unit
class TestAppStartupLogging:
    """The API configures logging from its settings on startup."""

    def test_startup_uses_settings(self) -> None:
        """Log directory and level come from Settings."""
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = Settings(db_path=":memory:", log_dir=tmpdir, log_level="WARNING")

            with TestClient(create_app(settings=settings)):
                logger = logging.getLogger("sprintlens")
                assert logger.level == logging.WARNING
                assert any(isinstance(h, RotatingFileHandler) for h in logger.handlers)
                logging.getLogger("sprintlens.api").warning("disk nearly full")

            content = (Path(tmpdir) / "sprintlens.log").read_text()
            assert "sprintlens.api | disk nearly full" in content


@pytest.mark.unit
class TestHelpers:
    """Tests for truncate_output and sanitize_for_log."""

    def test_truncate_output(self) -> None:
        """Long text is cut with a count of dropped characters."""
        assert truncate_output("short", max_length=10) == "short"
        result = truncate_output("x" * 30, max_length=10)
        assert result.startswith("x" * 10)
        assert "20 more chars" in result

    @pytest.mark.parametrize(
        ("text", "secret", "replacement"),
        [
            ("key re_abcdefghijklmnopqrstu used", "re_abcdefghijklmnopqrstu", "[RESEND_KEY]"),
            ("Authorization: Bearer tok.en-123", "tok.en-123", "Bearer [REDACTED]"),
            ("GET /x?api_key=s3cr3t&y=1", "s3cr3t", "api_key=[REDACTED]"),
            ("callback?token=abc123", "abc123", "token=[REDACTED]"),
        ],
    )
    def test_sanitize_for_log(self, text: str, secret: str, replacement: str) -> None:
        """Credentials are replaced with placeholders."""
        result = sanitize_for_log(text)

        assert secret not in result
        assert replacement in result

    def test_sanitize_leaves_plain_text(self) -> None:
        """Text without credentials is unchanged."""
        assert sanitize_for_log("Sprint 12 report ready") == "Sprint 12 report ready"
