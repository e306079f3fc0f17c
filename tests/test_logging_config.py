"""Logging setup for the app logger hierarchy."""

import logging

import pytest

from guild_hall_api.app.core.logging_config import APP_LOGGER, setup_logging


@pytest.fixture
def app_logger():
    logger = logging.getLogger(APP_LOGGER)
    saved = (logger.level, list(logger.handlers), logger.propagate)
    for handler in saved[1]:
        logger.removeHandler(handler)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    level, handlers, propagate = saved
    logger.setLevel(level)
    for handler in handlers:
        logger.addHandler(handler)
    logger.propagate = propagate


def test_setup_configures_app_logger_only(app_logger):
    root_handlers = list(logging.getLogger().handlers)

    logger = setup_logging("DEBUG")

    assert logger is app_logger
    assert logger.name == "guild_hall_api"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert logger.propagate is False
    assert logging.getLogger().handlers == root_handlers


def test_repeated_setup_only_updates_level(app_logger):
    setup_logging("DEBUG")
    setup_logging("warning")

    assert app_logger.level == logging.WARNING
    assert len(app_logger.handlers) == 1


def test_unknown_level_falls_back_to_info(app_logger):
    setup_logging("chatty")

    assert app_logger.level == logging.INFO


def test_logfile_adds_file_handler(app_logger, tmp_path):
    logfile = tmp_path / "guild.log"

    setup_logging("INFO", str(logfile))
    logging.getLogger("guild_hall_api.services").info("hello hall")
    for handler in app_logger.handlers:
        handler.flush()

    assert len(app_logger.handlers) == 2
    assert "[INFO] guild_hall_api.services: hello hall" in logfile.read_text(encoding="utf-8")
