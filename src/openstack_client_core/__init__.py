"""OpenStack Client Core - shared runtime for OpenStack-style service clients.

This library provides the machinery every resource call depends on:
- Keystone v3 authentication with single-flight token refresh
- Service catalog endpoint resolution and microversion headers
- Request execution with selective omission of unset body fields
- Lazily decoded result envelopes
- Pagination over body links, Link headers and markers
- A uniform error taxonomy for HTTP failures

Example:
    ```python
    from openstack_client_core import AuthOptions, ClientConfig, ProviderClient, new_service_client
    from openstack_client_core.pagination import next_field

    provider = ProviderClient(AuthOptions.from_env(), config=ClientConfig.from_env())
    client = new_service_client(provider, "container-infra", microversion="1.9")

    pager = client.paginate(f"clusters/{cluster_id}/nodegroups", items_key="nodegroups")
    node_groups = pager.all_items()
    ```
"""

from openstack_client_core.auth import AuthOptions, CredentialResolver, IdentityV3Client
from openstack_client_core.catalog import Endpoint, ServiceCatalog
from openstack_client_core.client import ServiceClient, new_service_client
from openstack_client_core.config import ClientConfig
from openstack_client_core.microversions import MicroversionRange
from openstack_client_core.pagination import Page, Pager
from openstack_client_core.provider import ProviderClient
from openstack_client_core.request import UNSET, RequestDescriptor, Unset, build_body, build_query
from openstack_client_core.results import Result

__version__ = "0.1.0"

__all__ = [
    "UNSET",
    "AuthOptions",
    "ClientConfig",
    "CredentialResolver",
    "Endpoint",
    "IdentityV3Client",
    "MicroversionRange",
    "Page",
    "Pager",
    "ProviderClient",
    "RequestDescriptor",
    "Result",
    "ServiceCatalog",
    "ServiceClient",
    "Unset",
    "__version__",
    "build_body",
    "build_query",
    "new_service_client",
]
