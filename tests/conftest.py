"""
tests/conftest.py

Pytest configuration and shared fixtures for the filedrop test suite.
"""

from __future__ import annotations

import pytest

from filedrop.config.settings import IntakeConfiguration
from filedrop.engine.clock import fixed_clock
from filedrop.engine.processor import IntakeEngine
from filedrop.utils.logging import configure_logging
from tests.fakes import (
    FIXED_TIMESTAMP,
    InMemoryStorageGateway,
    NotifierRegistry,
    default_intake_config,
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep deployment variables from the developer shell out of the tests."""
    for name in ("BUCKET_CONFIG", "FILEDROP_LOG_LEVEL", "AWS_ENDPOINT_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging():
    """Restore default logging after tests that reconfigure it."""
    yield
    configure_logging()


@pytest.fixture
def intake_config() -> IntakeConfiguration:
    return default_intake_config()


@pytest.fixture
def gateway(intake_config: IntakeConfiguration) -> InMemoryStorageGateway:
    return InMemoryStorageGateway(intake_config)


@pytest.fixture
def notifiers() -> NotifierRegistry:
    return NotifierRegistry()


@pytest.fixture
def engine(gateway: InMemoryStorageGateway, notifiers: NotifierRegistry) -> IntakeEngine:
    return IntakeEngine(gateway, notifiers, clock=fixed_clock(FIXED_TIMESTAMP))
