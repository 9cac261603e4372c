"""Testing utilities for clients built on the core.

Modules:
    factories: Mock responses, Keystone token documents and FakeCloud
    fixtures: Pre-built pytest fixtures (requires pytest)

Example:
    ```python
    from openstack_client_core.testing import FakeCloud, catalog_service, create_mock_response

    cloud = FakeCloud(catalog=[catalog_service("compute", [("RegionOne", "public", COMPUTE_URL)])])
    cloud.route("GET", f"{COMPUTE_URL}/servers/abc", create_mock_response(json={"server": {"id": "abc"}}))
    ```
"""

from openstack_client_core.testing.factories import (
    IDENTITY_URL,
    FakeCloud,
    catalog_service,
    create_error_response,
    create_mock_response,
    create_token_response,
)

__all__ = [
    "IDENTITY_URL",
    "FakeCloud",
    "catalog_service",
    "create_error_response",
    "create_mock_response",
    "create_token_response",
]
