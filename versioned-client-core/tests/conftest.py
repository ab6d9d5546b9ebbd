"""Pytest configuration and shared fixtures for versioned-client-core tests."""

import pytest

from versioned_client_core.config import Config
from versioned_client_core.service import ServiceDefinition
from versioned_client_core.testing import create_api


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Auto-cleanup: Clear configuration environment variables before each test.

    This prevents test pollution when testing version locks.
    """
    import os

    for key in list(os.environ.keys()):
        if key.startswith("VERSIONED_CLIENT_"):
            monkeypatch.delenv(key, raising=False)

    yield


@pytest.fixture
def config():
    """Configuration without .env loading."""
    return Config(load_dotenv=False)


@pytest.fixture
def dynamodb(config):
    """Service with the 2011-12-05 and 2012-08-10 APIs registered."""
    return ServiceDefinition.define(
        "dynamodb",
        [create_api("2011-12-05"), create_api("2012-08-10")],
        config,
    )


class RecordingPlugin:
    """Plugin that records the hooks it receives."""

    def __init__(self, name):
        self.name = name
        self.calls = []

    def before_initialize(self, client_class, config):
        self.calls.append(("before_initialize", client_class))
        config.setdefault("plugin_order", []).append(self.name)

    def after_initialize(self, client):
        self.calls.append(("after_initialize", client))

    def __repr__(self):
        return f"RecordingPlugin({self.name!r})"


@pytest.fixture
def plugin_factory():
    """Create named RecordingPlugin instances."""
    return RecordingPlugin
