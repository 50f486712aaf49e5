"""Shared fixtures for the appmetrics test suite."""

import pytest

from appmetrics.management import ManagementServer, register_platform_beans
from appmetrics.metrics import SharedMetricRegistries


class FakeClock:
    """A manually advanced clock with the ``time()`` interface of the time module."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def time(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def clean_shared_registries():
    """Each test starts without shared registries left over from other tests."""
    SharedMetricRegistries.clear()
    yield
    SharedMetricRegistries.clear()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def server():
    """A management server holding only the interpreter's own beans."""
    management_server = ManagementServer()
    register_platform_beans(management_server)
    return management_server


@pytest.fixture
def empty_server():
    return ManagementServer()
