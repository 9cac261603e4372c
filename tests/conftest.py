"""Pytest configuration and shared fixtures for openstack-client-core tests."""

import os

import pytest

from openstack_client_core.testing.fixtures import auth_options, fake_cloud, provider  # noqa: F401


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Auto-cleanup: clear OS_* variables so a developer's openrc cannot leak into tests."""
    for key in list(os.environ.keys()):
        if key.startswith(("OS_", "TEST_")):
            monkeypatch.delenv(key, raising=False)

    yield
