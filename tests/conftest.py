import pytest

from loadstate import set_scheduler


@pytest.fixture(autouse=True)
def _reset_scheduler():
    yield
    set_scheduler(None)
