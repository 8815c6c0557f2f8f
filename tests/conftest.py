import logging

import pytest

from logging_config import APP_LOGGERS


@pytest.fixture(autouse=True)
def reset_app_loggers():
    """Undo handler changes so one test's logging setup never leaks into the next."""
    yield
    for name in (*APP_LOGGERS, "__main__"):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
