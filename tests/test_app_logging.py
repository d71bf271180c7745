"""Tests for logging configuration."""

import logging

from foodlens.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("foodlens")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert logger.propagate is False


def test_module_loggers_inherit_package_handler() -> None:
    logger = logging.getLogger("foodlens")
    logger.handlers.clear()

    configure_logging(logging.DEBUG)

    child = logging.getLogger("foodlens.services.analysis")
    assert child.getEffectiveLevel() == logging.DEBUG
    assert logger.handlers
