import logging

import pytest

from py_fdc import restore_defaults
from py_fdc.logger import logger
from py_fdc.tables import BallisticTable
from tests.fixtures_and_helpers import make_linear_table, make_rows

logger.setLevel(logging.DEBUG)


@pytest.fixture
def table():
    return BallisticTable(make_rows())


@pytest.fixture
def linear_table():
    return make_linear_table()


@pytest.fixture(autouse=True)
def default_config():
    restore_defaults()
    yield
    restore_defaults()
