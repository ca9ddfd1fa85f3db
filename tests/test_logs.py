"""
Unit tests for similarity/logs.py
"""
import logging

from similarity.logs import LOG_FILE_NAME, setup_logging


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_level_from_argument(self, restore_root_logger, monkeypatch):
        monkeypatch.delenv("LOG_DIR", raising=False)
        root = setup_logging(level="debug")
        assert root is logging.getLogger()
        assert root.level == logging.DEBUG

    def test_level_from_environment(self, restore_root_logger, monkeypatch):
        monkeypatch.delenv("LOG_DIR", raising=False)
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        assert setup_logging().level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, restore_root_logger, monkeypatch):
        monkeypatch.delenv("LOG_DIR", raising=False)
        assert setup_logging(level="chatty").level == logging.INFO

    def test_file_handler(self, restore_root_logger, tmp_path):
        """A log file is written under the log directory."""
        log_dir = tmp_path / "logs"
        setup_logging(log_dir=str(log_dir), level="INFO")
        logging.getLogger("similarity.test").info("hello")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = (log_dir / LOG_FILE_NAME).read_text(encoding="utf-8")
        assert "similarity.test - INFO - hello" in content
