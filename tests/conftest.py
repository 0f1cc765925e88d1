"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for profiles, transports and fresh
signaling components.
"""

import asyncio
import os

import pytest

# Keep test runs from writing the JSON error log into the working tree
os.environ.setdefault("LOG_FILE_PATH", "/tmp/castrelay-test.log")

from castrelay.connection_registry import (  # noqa: E402
    ConnectionRegistry,
    connection_registry,
)
from castrelay.managers.host_arbiter import HostArbiter  # noqa: E402
from castrelay.managers.message_router import MessageRouter  # noqa: E402
from castrelay.schemas.profile import ProfileModel, UserRole  # noqa: E402
from tests.mocks.websocket_mocks import FakeTransport  # noqa: E402

GRACE_PERIOD = 0.05


@pytest.fixture(autouse=True)
def reset_global_registry():
    """
    Empties the application-wide registry around every test.

    The lock is recreated too, an asyncio.Lock must not be shared
    across the event loops of different tests.
    """
    connection_registry._connections = []
    connection_registry.lock = asyncio.Lock()
    yield
    connection_registry._connections = []


@pytest.fixture
def make_profile():
    """
    Factory for profiles.

    Returns:
        Callable: make_profile(id, role="Viewer", name=None) -> ProfileModel
    """

    def _make(
        profile_id: str, role: UserRole | str = UserRole.VIEWER, name=None
    ) -> ProfileModel:
        return ProfileModel(
            id=profile_id, name=name or f"name-{profile_id}", role=role
        )

    return _make


@pytest.fixture
def host_profile(make_profile):
    return make_profile("h1", UserRole.HOST, name="Host One")


@pytest.fixture
def viewer_profile(make_profile):
    return make_profile("v1", UserRole.VIEWER, name="Viewer One")


@pytest.fixture
def make_transport():
    """
    Factory for `FakeTransport` instances.

    Returns:
        Callable: make_transport(transport_id=None, connected=True)
    """
    return FakeTransport


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def arbiter(registry):
    """HostArbiter over the `registry` fixture with a short grace period."""
    return HostArbiter(registry, grace_period=GRACE_PERIOD)


@pytest.fixture
def router(registry):
    return MessageRouter(registry)
