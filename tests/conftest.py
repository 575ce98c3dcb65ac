import logging

import pytest


@pytest.fixture(autouse=True)
def reset_notifywatch_logger():
    """Drop handlers the CLI attached so later tests don't log to a stale stream."""
    yield
    logger = logging.getLogger("notifywatch")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
