" generic fixtures "
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from pytest_asyncio import fixture

from dyndesk.adapters.proxy import BackendProxy
from dyndesk.config import Configuration
from dyndesk.desktops import DynamicDesktops
from dyndesk.schema import DYNDESK_CONFIG_SCHEMA

from .testtools import FakeHost


def pytest_configure():
    "Runs once before all"
    from dyndesk.logging_setup import init_logger

    init_logger("/dev/null", force_debug=True)


@pytest.fixture
def test_logger():
    "A silent logger"
    logger = logging.getLogger("tests")
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(1)
    logger.propagate = False
    return logger


@pytest.fixture
def host():
    "A window manager with two empty desktops"
    return FakeHost()


@pytest.fixture
def config(test_logger):
    return Configuration({}, logger=test_logger, schema=DYNDESK_CONFIG_SCHEMA)


@pytest.fixture
def subscriptions():
    subs = MagicMock(name="subscriptions")
    subs.subscribe = AsyncMock()
    subs.unsubscribe = AsyncMock(return_value=True)
    subs.__len__.return_value = 0
    return subs


@fixture
async def desktops(host, config, subscriptions, test_logger):
    "The desktops controller, plugged to the fake host"
    return DynamicDesktops(BackendProxy(host, test_logger), subscriptions, config, test_logger)
