"""Tests for loguru setup."""

import sys

from loguru import logger

from kaamyab.core.logger import setup_logger, setup_logger_from_settings


def test_setup_logger_adds_file_sink(tmp_path):
    log_file = tmp_path / "logs" / "kaamyab.log"
    try:
        setup_logger(level="DEBUG", log_file=str(log_file))
        logger.info("Plan session loaded", user_id="user-1")
        assert log_file.exists()
        assert "Plan session loaded" in log_file.read_text()
    finally:
        logger.remove()
        logger.add(sys.stderr)


def test_setup_from_settings_honours_level(tmp_path, test_settings):
    config = test_settings.model_copy(update={"log_level": "WARNING", "log_file": str(tmp_path / "core.log")})
    try:
        setup_logger_from_settings(config)
        logger.info("Plan write committed")
        logger.bind(plan_id="p-1").warning("Plan write failed, rolled back")
        text = (tmp_path / "core.log").read_text()
        assert "Plan write failed, rolled back" in text
        assert "Plan write committed" not in text
        assert "p-1" in text
    finally:
        logger.remove()
        logger.add(sys.stderr)
