import pytest

from tests.helpers import Clock, FakeStore, make_runtime


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def runtime(store, clock):
    return make_runtime(store=store, clock=clock)
