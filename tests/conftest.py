"""Fixtures for testing."""
import pytest

from tests.common import FakeGateway


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    yield


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()
