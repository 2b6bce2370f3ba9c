"""
Shared fixtures.
"""

import logging

import pytest

from tfswitch import logging_config


@pytest.fixture(autouse=True)
def reset_tfswitch_logger():
    """Undo setup_logging() so handlers bound to captured streams don't leak between tests."""
    yield
    logger = logging.getLogger(logging_config.LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
