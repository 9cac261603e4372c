"""Authentication: credential lookup, auth options and Keystone v3 tokens.

Example:
    ```python
    from openstack_client_core.auth import AuthOptions, IdentityV3Client

    options = AuthOptions.from_env()
    result = IdentityV3Client(httpx.Client()).authenticate(options)
    print(result.expires_at, len(result.catalog))
    ```
"""

from openstack_client_core.auth.credentials import CredentialResolver
from openstack_client_core.auth.exceptions import CredentialError, CredentialNotFoundError
from openstack_client_core.auth.identity import AuthResult, IdentityV3Client
from openstack_client_core.auth.options import AuthOptions

__all__ = [
    "AuthOptions",
    "AuthResult",
    "CredentialError",
    "CredentialNotFoundError",
    "CredentialResolver",
    "IdentityV3Client",
]
