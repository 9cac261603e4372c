"""Single-request executor.

Issues one blocking HTTP request for a :class:`RequestDescriptor` against a
resolved endpoint. The only retry it ever performs is a single resend after a
401/419 once the token has been refreshed through the ``reauthenticate``
callback.
"""

import json
import logging
from collections.abc import Callable

import httpx

from openstack_client_core.catalog import Endpoint
from openstack_client_core.errors.exceptions import UnreachableError
from openstack_client_core.errors.handler import classify_response
from openstack_client_core.microversions import check_microversion, microversion_headers
from openstack_client_core.request import RequestDescriptor
from openstack_client_core.results import Result

logger = logging.getLogger(__name__)

# Statuses signalling an expired or revoked token
REAUTH_STATUS_CODES = frozenset({401, 419})

TOKEN_HEADER = "X-Auth-Token"

Reauthenticator = Callable[[str], str]


def join_url(base: str, path: str) -> str:
    """Join an endpoint URL and a relative path; absolute URLs pass through."""
    if path.startswith(("http://", "https://")):
        return path
    if not path:
        return base
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


class RequestExecutor:
    """Send requests described by RequestDescriptor and wrap them in Results.

    Args:
        http: Shared httpx client (thread-safe)
        user_agent: Value of the User-Agent header
    """

    def __init__(self, http: httpx.Client, *, user_agent: str | None = None) -> None:
        self.http = http
        self.user_agent = user_agent

    def build_headers(self, descriptor: RequestDescriptor, endpoint: Endpoint, token: str | None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        if token:
            headers[TOKEN_HEADER] = token
        if descriptor.has_body:
            headers["Content-Type"] = "application/json"
        if descriptor.microversion is not None:
            headers.update(microversion_headers(endpoint.service_type, descriptor.microversion))

        # Caller overrides win; None removes a default header
        for name, value in descriptor.headers.items():
            for existing in [key for key in headers if key.lower() == name.lower()]:
                del headers[existing]
            if value is not None:
                headers[name] = value
        return headers

    def execute(
        self,
        descriptor: RequestDescriptor,
        endpoint: Endpoint | str,
        token: str | None,
        *,
        reauthenticate: Reauthenticator | None = None,
    ) -> Result:
        """Execute one logical call.

        Args:
            descriptor: What to send
            endpoint: Resolved endpoint (or bare base URL)
            token: Current auth token
            reauthenticate: Called with the rejected token on 401/419; must
                return a fresh token. Used at most once per call.

        Returns:
            Result for an expected status

        Raises:
            UnsupportedMicroversionError: Microversion requested but not supported
            UnreachableError: Transport failure
            ClientError: Status not in the descriptor's expected statuses
        """
        if isinstance(endpoint, str):
            endpoint = Endpoint.from_url(endpoint)
        if descriptor.microversion is not None:
            check_microversion(descriptor.microversion, endpoint.microversions, service_type=endpoint.service_type)

        url = join_url(endpoint.url, descriptor.path)
        expected = descriptor.expected_statuses
        document = descriptor.json_body() if descriptor.has_body else None
        params = descriptor.query() or None

        response = self._send(descriptor, url, self.build_headers(descriptor, endpoint, token), document, params)

        if (
            response.status_code not in expected
            and response.status_code in REAUTH_STATUS_CODES
            and descriptor.allow_reauth
            and reauthenticate is not None
        ):
            logger.warning(
                f"Request {descriptor.method} {url} returned {response.status_code}, reauthenticating and retrying once"
            )
            response.close()
            token = reauthenticate(token or "")
            response = self._send(descriptor, url, self.build_headers(descriptor, endpoint, token), document, params)

        if response.status_code not in expected:
            raise classify_response(response, expected=expected)

        return Result(response, allow_empty=descriptor.allows_empty_body)

    def _send(
        self,
        descriptor: RequestDescriptor,
        url: str,
        headers: dict[str, str],
        document,
        params,
    ) -> httpx.Response:
        kwargs = {"headers": headers}
        if descriptor.has_body:
            kwargs["content"] = json.dumps(document).encode("utf-8")
        if params:
            kwargs["params"] = params
        try:
            return self.http.request(descriptor.method, url, **kwargs)
        except httpx.TransportError as e:
            raise UnreachableError(f"{descriptor.method} {url} failed: {e}", url=url) from e
