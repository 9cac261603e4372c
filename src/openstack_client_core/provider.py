"""Provider client: session ownership, token refresh and endpoint resolution.

A :class:`ProviderClient` owns one authenticated session (token, expiry,
catalog) and is shared by every :class:`~openstack_client_core.client.ServiceClient`
created from it. It is safe to use from many threads.

Example:
    ```python
    from openstack_client_core import AuthOptions, ClientConfig, ProviderClient

    with ProviderClient(AuthOptions.from_env(), config=ClientConfig.from_env()) as provider:
        provider.authenticate()
        endpoint = provider.resolve_endpoint("container-infra", interface="public")
    ```
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

import httpx

from openstack_client_core.auth.identity import AuthResult, IdentityV3Client
from openstack_client_core.auth.options import AuthOptions
from openstack_client_core.catalog import Endpoint, ServiceCatalog
from openstack_client_core.config import ClientConfig
from openstack_client_core.errors.exceptions import AuthenticationError
from openstack_client_core.executor import RequestExecutor
from openstack_client_core.request import RequestDescriptor
from openstack_client_core.results import Result
from openstack_client_core.transport import create_transport

logger = logging.getLogger(__name__)


class Authenticator(Protocol):
    def authenticate(self, options: AuthOptions) -> AuthResult: ...


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class _SessionState:
    """Immutable session snapshot; replaced wholesale on (re)authentication."""

    identity_endpoint: str
    token: str = field(repr=False)
    expires_at: datetime
    catalog: ServiceCatalog
    result: AuthResult = field(repr=False)


class ProviderClient:
    """Owner of the authenticated session.

    Args:
        options: Credentials used for authentication and reauthentication
        config: Shared client settings
        http: httpx client to use (one is created and owned otherwise)
        authenticator: Identity backend (IdentityV3Client by default)
        clock: Returns the current aware datetime; used for expiry checks
    """

    def __init__(
        self,
        options: AuthOptions,
        *,
        config: ClientConfig | None = None,
        http: httpx.Client | None = None,
        authenticator: Authenticator | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.options = options
        self.config = config or ClientConfig()
        self._owns_http = http is None
        if http is None:
            http = httpx.Client(
                transport=create_transport(verify=self.config.verify, log_requests=self.config.log_requests),
                timeout=self.config.timeout,
            )
        self.http = http
        self.identity = authenticator or IdentityV3Client(
            http,
            user_agent=self.config.user_agent,
            microversions=self.config.microversions,
        )
        self.executor = RequestExecutor(http, user_agent=self.config.user_agent)
        self._clock = clock or _utcnow

        self._state: _SessionState | None = None
        self._lock = threading.Lock()
        self._inflight: Future | None = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_http and not self.http.is_closed:
            self.http.close()

    @property
    def token(self) -> str | None:
        """Current token without any refresh (None before authentication)."""
        state = self._state
        return state.token if state is not None else None

    @property
    def expires_at(self) -> datetime | None:
        state = self._state
        return state.expires_at if state is not None else None

    @property
    def catalog(self) -> ServiceCatalog | None:
        state = self._state
        return state.catalog if state is not None else None

    def is_expired(self) -> bool:
        state = self._state
        return state is None or self._clock() >= state.expires_at

    def authenticate(self, options: AuthOptions | None = None) -> AuthResult:
        """Obtain a new token and catalog.

        Concurrent calls share one identity request.

        Raises:
            AuthenticationError, UnreachableError, ProtocolError
        """
        if options is not None:
            self.options = options
        return self._single_flight(None, force=True)

    def reauthenticate(self, stale_token: str | None = None) -> str:
        """Refresh the token, sharing any refresh already in flight.

        Args:
            stale_token: The token the caller saw rejected or expired. If the
                session already holds a different token, that token is
                returned without another identity call.

        Returns:
            The refreshed token

        Raises:
            AuthenticationError: If reauthentication is disabled or rejected
        """
        if not self.options.allow_reauth:
            raise AuthenticationError("Token was rejected or expired and reauthentication is disabled")
        return self._single_flight(stale_token, force=stale_token is None).token

    def valid_token(self) -> str:
        """Current token, authenticating or reauthenticating first if needed."""
        state = self._state
        if state is None:
            return self._single_flight(None, force=False).token

        if self._clock() >= state.expires_at:
            logger.warning(f"Token expired at {state.expires_at.isoformat()}, reauthenticating")
            return self.reauthenticate(state.token)
        return state.token

    def _single_flight(self, stale_token: str | None, *, force: bool) -> AuthResult:
        with self._lock:
            state = self._state
            if not force and state is not None and state.token != stale_token:
                return state.result
            flight = self._inflight
            leader = flight is None
            if leader:
                flight = self._inflight = Future()

        if not leader:
            logger.debug("Waiting for in-flight authentication")
            return flight.result()

        try:
            result = self.identity.authenticate(self.options)
        except BaseException as e:
            with self._lock:
                self._inflight = None
            flight.set_exception(e)
            raise

        with self._lock:
            self._state = _SessionState(
                identity_endpoint=self.options.identity_endpoint,
                token=result.token,
                expires_at=result.expires_at,
                catalog=result.catalog,
                result=result,
            )
            self._inflight = None
        flight.set_result(result)
        return result

    def resolve_endpoint(
        self,
        service_type: str,
        region: str | None = None,
        interface: str | None = None,
        microversion: str | None = None,
    ) -> Endpoint:
        """Resolve a catalog endpoint, authenticating first if there is no session.

        Region and interface default to the ClientConfig values.

        Raises:
            EndpointNotFoundError, UnsupportedMicroversionError
        """
        self.valid_token()
        state = self._state
        return state.catalog.resolve(
            service_type,
            region=region if region is not None else self.config.region,
            interface=interface or self.config.interface,
            microversion=microversion,
        )

    def request(self, descriptor: RequestDescriptor, endpoint: Endpoint | str) -> Result:
        """Execute a request with the current token and one reauth retry on 401."""
        token = self.valid_token()
        reauthenticate = self.reauthenticate if self.options.allow_reauth else None
        return self.executor.execute(descriptor, endpoint, token, reauthenticate=reauthenticate)
