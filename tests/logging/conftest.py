import logging.handlers

import pytest

from gaas._cogs.structs.references import GAFFERS, NAMESPACES
from gaas._core.actions.loggers import ResourceLogger


def _make_record(logger: ResourceLogger) -> logging.LogRecord:
    handler = logging.handlers.BufferingHandler(capacity=100)
    logger.logger.addHandler(handler)
    try:
        logger.info("hello")
    finally:
        logger.logger.removeHandler(handler)
    return handler.buffer[0]


@pytest.fixture()
def ns_record():
    return _make_record(ResourceLogger(resource=GAFFERS, namespace='namespace1', name='name1'))


@pytest.fixture()
def cluster_record():
    return _make_record(ResourceLogger(resource=NAMESPACES, namespace=None, name='name1'))
