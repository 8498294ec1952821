"""Unit tests for logging configuration."""

import logging

import pytest

from mux_console.shared.logging_config import configure_logging, parse_level


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestParseLevel:
    def test_names(self):
        assert parse_level("debug") == logging.DEBUG
        assert parse_level(" WARNING ") == logging.WARNING

    def test_numbers_pass_through(self):
        assert parse_level(logging.ERROR) == logging.ERROR

    def test_unknown_name_is_info(self):
        assert parse_level("chatty") == logging.INFO


class TestConfigureLogging:
    def test_sets_root_level(self):
        configure_logging("DEBUG")

        assert logging.getLogger().level == logging.DEBUG

    def test_quiets_http_loggers(self):
        configure_logging("DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_stricter_level_wins(self):
        configure_logging("ERROR", quiet=["mux_console.test_noise"])

        assert logging.getLogger("mux_console.test_noise").level == logging.ERROR
