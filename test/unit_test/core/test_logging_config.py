"""Unit tests for the logging configuration module."""

import logging
from pathlib import Path

import pytest

from toolchat_ai.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    LOG_FILE_NAME,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    setup_logging,
)


def _console_handler() -> logging.Handler:
    root_logger = logging.getLogger()
    handler = next(
        (h for h in root_logger.handlers if type(h) is logging.StreamHandler),
        None,
    )
    assert handler is not None
    return handler


class TestSetupLogging:
    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("WARNING", logging.WARNING),
            ("error", logging.ERROR),
        ],
    )
    def test_console_level(self, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False)
        assert _console_handler().level == expected_level

    def test_level_from_environment(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TOOLCHAT_AI_LOG_LEVEL", "warning")
        setup_logging(enable_file=False)
        assert _console_handler().level == logging.WARNING

    @pytest.mark.parametrize(
        "log_format,expected_format",
        [
            ("simple", SIMPLE_FORMAT),
            ("detailed", DETAILED_FORMAT),
            ("json", JSON_FORMAT),
            ("unknown", DETAILED_FORMAT),
        ],
    )
    def test_formats(self, log_format, expected_format):
        setup_logging(log_format=log_format, enable_file=False)
        assert _console_handler().formatter._fmt == expected_format

    def test_repeated_setup_does_not_stack_handlers(self):
        setup_logging(enable_file=False)
        setup_logging(enable_file=False)
        consoles = [h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler]
        assert len(consoles) == 1

    def test_file_logging(self, tmp_path: Path):
        setup_logging(enable_file=True, log_file_dir=str(tmp_path / "logs"))
        try:
            file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
            assert len(file_handlers) == 1
            assert Path(file_handlers[0].baseFilename) == tmp_path / "logs" / LOG_FILE_NAME
        finally:
            setup_logging(enable_file=False)

    def test_module_levels_applied(self):
        setup_logging(enable_file=False)
        for module_name, level in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(module_name).level == logging.getLevelName(level)


def test_get_logger_returns_named_logger():
    assert get_logger("toolchat_ai.test").name == "toolchat_ai.test"
