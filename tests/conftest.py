import logging
import os

import pytest

from tft_collector.store import Store


@pytest.fixture
def store(tmp_path):
    db = Store(os.path.join(str(tmp_path), "test.db"))
    db.init_schema()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def reset_logging():
    # the CLI installs handlers on the package logger; drop them between tests
    yield
    logger = logging.getLogger("tft_collector")
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.NOTSET)
