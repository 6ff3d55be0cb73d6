"""
Unit Tests for Logging Setup

Run with:
    pytest tests/unit/test_logging.py -v
"""

import logging

import pytest

from core.logging import ROOT_LOGGER_NAME, get_logger, setup_logging


@pytest.fixture
def restore_level():
    root = logging.getLogger(ROOT_LOGGER_NAME)
    level = root.level
    yield
    setup_logging(log_level=logging.getLevelName(level))


class TestSetupLogging:
    """Tests for setup_logging"""

    def test_sets_requested_level(self, restore_level):
        logger = setup_logging(log_level="debug")

        assert logger.name == ROOT_LOGGER_NAME
        assert logger.level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self, restore_level):
        assert setup_logging(log_level="chatty").level == logging.INFO


class TestGetLogger:
    """Tests for get_logger"""

    def test_child_of_root_logger(self):
        logger = get_logger("fetchers.price")

        assert logger.name == "btcrub.fetchers.price"
        assert logger.parent is logging.getLogger(ROOT_LOGGER_NAME)
