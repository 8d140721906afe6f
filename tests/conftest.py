import logging

import pytest

from spector.loaders import document_loader


@pytest.fixture(autouse=True)
def _reset_spector_state():
    yield
    logger = logging.getLogger("spector")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    document_loader.clear_cache()
