"""Unit tests for logger module."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from crawl4ai_mcp.core.logger import BACKUP_COUNT, MAX_LOG_SIZE_BYTES, get_logger


class TestLoggerCreation:
    """Test logger creation and handler setup."""

    def test_logger_creates_console_and_file_handlers(self, tmp_path: Path) -> None:
        logger = get_logger("test_bridge", log_file=tmp_path / "bridge.log")

        stream_handlers = [
            h
            for h in logger.handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, RotatingFileHandler)
        ]
        file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
        assert len(stream_handlers) == 1
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == MAX_LOG_SIZE_BYTES == 10 * 1024 * 1024
        assert file_handlers[0].backupCount == BACKUP_COUNT == 3

    def test_reconfiguring_replaces_handlers(self, tmp_path: Path) -> None:
        get_logger("test_reconfigure", log_file=tmp_path / "a.log")
        logger = get_logger("test_reconfigure", log_file=tmp_path / "b.log")

        assert len(logger.handlers) == 2
        file_handler = next(h for h in logger.handlers if isinstance(h, RotatingFileHandler))
        assert file_handler.baseFilename == str(tmp_path / "b.log")


class TestLoggerFormatting:
    def test_logger_formats_human_readable(self, tmp_path: Path) -> None:
        logger = get_logger("test_format", log_file=tmp_path / "bridge.log")

        for handler in logger.handlers:
            assert handler.formatter is not None
            assert handler.formatter._fmt == (
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
            )


class TestLoggerLevels:
    @pytest.mark.parametrize("level", ["DEBUG", "INFO", "WARNING", "error"])
    def test_logger_respects_log_level(self, tmp_path: Path, level: str) -> None:
        logger = get_logger("test_levels", log_level=level, log_file=tmp_path / "x.log")
        assert logger.level == getattr(logging, level.upper())

    def test_unknown_level_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Unknown log level"):
            get_logger("test_levels", log_level="LOUD", log_file=tmp_path / "x.log")


class TestLoggerFileOutput:
    def test_logger_creates_log_directory_and_writes(self, tmp_path: Path) -> None:
        log_file = tmp_path / "nested" / "directory" / "bridge.log"

        logger = get_logger("test_file_output", log_file=log_file)
        logger.info("Bridge ready")
        for handler in logger.handlers:
            handler.flush()

        assert log_file.exists()
        assert "| INFO | test_file_output | Bridge ready" in log_file.read_text()

    def test_child_loggers_propagate(self, tmp_path: Path) -> None:
        log_file = tmp_path / "bridge.log"
        logger = get_logger("test_parent", log_file=log_file)

        logging.getLogger("test_parent.services.executor").warning("retrying")
        for handler in logger.handlers:
            handler.flush()

        assert "test_parent.services.executor | retrying" in log_file.read_text()
