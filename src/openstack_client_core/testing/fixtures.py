"""Pytest fixtures for code built on the client core.

Register them from a ``conftest.py``:

```python
from openstack_client_core.testing.fixtures import auth_options, fake_cloud, provider  # noqa: F401
```
"""

import httpx
import pytest

from openstack_client_core.auth.options import AuthOptions
from openstack_client_core.config import ClientConfig
from openstack_client_core.provider import ProviderClient
from openstack_client_core.testing.factories import IDENTITY_URL, FakeCloud


@pytest.fixture
def auth_options() -> AuthOptions:
    """Password credentials pointing at the fake identity endpoint."""
    return AuthOptions(
        identity_endpoint=IDENTITY_URL,
        username="demo",
        password="secret",
        domain_name="Default",
        project_name="demo",
    )


@pytest.fixture
def fake_cloud() -> FakeCloud:
    return FakeCloud()


@pytest.fixture
def provider(auth_options, fake_cloud):
    """ProviderClient wired to ``fake_cloud`` through httpx.MockTransport."""
    http = httpx.Client(transport=httpx.MockTransport(fake_cloud.handler))
    client = ProviderClient(auth_options, config=ClientConfig(log_requests=False), http=http)
    yield client
    http.close()
