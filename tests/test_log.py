"""Tests for per-instance logger setup."""

from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from cached_request.log import (
    CLIENT_LOGGER_NAME,
    configure_logging,
    get_client_logger,
    level_from_name,
)


@pytest.fixture
def package_logger():
    """Snapshot and restore the package logger's handlers and level."""
    logger = logging.getLogger("cached_request")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


class TestLevelFromName:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("DEBUG", logging.DEBUG),
            ("info", logging.INFO),
            ("WARN", logging.WARNING),
            ("WARNING", logging.WARNING),
            ("ERROR", logging.ERROR),
        ],
    )
    def test_known_levels(self, name: str, expected: int) -> None:
        assert level_from_name(name) == expected

    def test_off_is_above_critical(self) -> None:
        assert level_from_name("OFF") > logging.CRITICAL


class TestGetClientLogger:
    def test_named_after_instance(self) -> None:
        logger = get_client_logger("inventory", "INFO")
        assert logger.name == f"{CLIENT_LOGGER_NAME}.inventory"
        assert logger.level == logging.INFO

    def test_shared_logger_without_instance_id(self, shared_client_logger) -> None:
        assert get_client_logger(None).name == CLIENT_LOGGER_NAME

    def test_distinct_instances_distinct_loggers(self) -> None:
        assert get_client_logger("a") is not get_client_logger("b")

    def test_shared_logger_level_only_lowers(self, shared_client_logger) -> None:
        get_client_logger(None, "INFO")
        get_client_logger(None, "OFF")
        assert shared_client_logger.level == logging.INFO
        get_client_logger(None, "DEBUG")
        assert shared_client_logger.level == logging.DEBUG

    def test_named_logger_level_follows_latest(self) -> None:
        get_client_logger("relevel", "INFO")
        assert get_client_logger("relevel", "ERROR").level == logging.ERROR

    def test_off_silences(self) -> None:
        logger = get_client_logger("quiet", "OFF")
        assert not logger.isEnabledFor(logging.CRITICAL)


class TestConfigureLogging:
    def test_installs_single_rich_handler(self, package_logger) -> None:
        configure_logging()
        configure_logging()
        rich_handlers = [h for h in package_logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
        assert package_logger.level == logging.INFO

    def test_verbose_enables_debug(self, package_logger) -> None:
        configure_logging(verbose=True)
        assert package_logger.level == logging.DEBUG
