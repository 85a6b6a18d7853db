"""Pytest configuration and shared fixtures for quickbase-client tests."""

import httpx
import pytest

from quickbase_client import QuickBase, QuickBaseLegacy, QuickBaseOptions


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Auto-cleanup: clear Quickbase and test environment variables before each test."""
    import os

    test_prefixes = ("TEST_", "QB_")

    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in test_prefixes):
            monkeypatch.delenv(key, raising=False)

    yield


@pytest.fixture
def make_client():
    """Build a REST client whose requests are answered by ``handler``."""

    def factory(handler, **options) -> QuickBase:
        settings = {
            "realm": "demo.quickbase.com",
            "user_token": "user-token",
            "connection_limit_period": None,
            **options,
        }
        client = QuickBase(QuickBaseOptions(**settings), transport=httpx.MockTransport(handler))
        return client

    return factory


@pytest.fixture
def make_legacy_client():
    """Build a legacy XML client whose requests are answered by ``handler``."""

    def factory(handler, **options) -> QuickBaseLegacy:
        settings = {"realm": "demo", "connection_limit_period": None, **options}
        return QuickBaseLegacy(QuickBaseOptions(**settings), transport=httpx.MockTransport(handler))

    return factory
