"""
Tests for ``setup_logging`` level handling.
"""

import logging

import pytest

from account_api.app.core.logging_config import ACCESS_LOGGERS, PACKAGE_LOGGER, setup_logging


@pytest.fixture(autouse=True)
def restore_levels():
    names = (PACKAGE_LOGGER, *ACCESS_LOGGERS)
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def test_package_logger_follows_configured_level():
    logger = setup_logging("debug")

    assert logger is logging.getLogger(PACKAGE_LOGGER)
    assert logger.level == logging.DEBUG


def test_access_log_is_held_at_warning():
    setup_logging("DEBUG")
    assert logging.getLogger("uvicorn.access").level == logging.WARNING

    setup_logging("ERROR")
    assert logging.getLogger("uvicorn.access").level == logging.ERROR


def test_unknown_level_falls_back_to_info():
    assert setup_logging("chatty").level == logging.INFO


def test_each_call_reapplies_the_level():
    setup_logging("WARNING")
    setup_logging("INFO")

    assert logging.getLogger(PACKAGE_LOGGER).level == logging.INFO
