"""
Shared pytest fixtures for Sessionkeeper tests.

This module provides common fixtures including:
- FakeClock: Manually advanced clock for deterministic expiry tests
- Registry fixtures built on the fake clock
- FastAPI app and client utilities
"""

import os
import sys
from datetime import UTC, datetime, timedelta

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sessionkeeper.config.provider import (
    APIConfig,
    CookieConfig,
    SessionConfig,
    StaticConfigProvider,
)
from sessionkeeper.modules.session import SessionRegistry


class FakeClock:
    """
    Clock that only moves when told to.

    Usage:
        def test_expiry(clock, registry):
            start = registry.start_session()
            clock.advance(hours=3)
            assert registry.cleanup_expired() == 1
    """

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta = None, **kwargs) -> datetime:
        self.now += delta if delta is not None else timedelta(**kwargs)
        return self.now


LIFESPAN = timedelta(minutes=30)


@pytest.fixture
def clock():
    """Manually advanced clock."""
    return FakeClock()


@pytest.fixture
def registry(clock):
    """Registry with a 30 minute lifespan on the fake clock."""
    return SessionRegistry(lifespan=LIFESPAN, clock=clock)


@pytest.fixture
def config_provider():
    """Static configuration with a short sweep interval."""
    return StaticConfigProvider(
        session=SessionConfig(lifespan=LIFESPAN, sweep_interval=timedelta(seconds=60)),
        cookie=CookieConfig(name="sk_session"),
        api=APIConfig(),
    )


@pytest.fixture
def app(config_provider, registry):
    """Sessionkeeper app wired to the fake-clock registry."""
    from sessionkeeper.main import create_app

    return create_app(config_provider, registry=registry)
