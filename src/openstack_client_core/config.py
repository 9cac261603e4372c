"""Client configuration."""

from collections.abc import Mapping
from dataclasses import dataclass, field

from openstack_client_core.auth.credentials import CredentialResolver
from openstack_client_core.microversions import MicroversionRange

DEFAULT_USER_AGENT = "openstack-client-core"
DEFAULT_TIMEOUT = 30.0

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class ClientConfig:
    """Settings shared by every request made through a ProviderClient.

    Attributes:
        region: Default region for endpoint resolution (None matches any region)
        interface: Default endpoint interface
        timeout: Per-request timeout in seconds
        verify: TLS verification flag or CA bundle path
        user_agent: Value of the User-Agent header
        microversions: Service type -> accepted microversion range
        log_requests: Wrap the transport with LoggingTransport
    """

    region: str | None = None
    interface: str = "public"
    timeout: float = DEFAULT_TIMEOUT
    verify: bool | str = True
    user_agent: str = DEFAULT_USER_AGENT
    microversions: Mapping[str, MicroversionRange] = field(default_factory=dict)
    log_requests: bool = True

    def __post_init__(self):
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    @classmethod
    def from_env(
        cls,
        resolver: CredentialResolver | None = None,
        **overrides,
    ) -> "ClientConfig":
        """Read ``OS_REGION_NAME``, ``OS_INTERFACE``, ``OS_CACERT``, ``OS_INSECURE`` and ``OS_TIMEOUT``.

        Keyword overrides take precedence over the environment.

        Raises:
            ValueError: If ``OS_TIMEOUT`` is not a number.
        """
        resolver = resolver or CredentialResolver()

        settings: dict = {}
        region = resolver.resolve("OS_REGION_NAME")
        if region:
            settings["region"] = region

        interface = resolver.resolve("OS_INTERFACE", "OS_ENDPOINT_TYPE")
        if interface:
            settings["interface"] = interface

        insecure = resolver.resolve("OS_INSECURE")
        cacert = resolver.resolve("OS_CACERT")
        if insecure and insecure.lower() in _TRUE_VALUES:
            settings["verify"] = False
        elif cacert:
            settings["verify"] = cacert

        timeout = resolver.resolve("OS_TIMEOUT")
        if timeout:
            try:
                settings["timeout"] = float(timeout)
            except ValueError:
                raise ValueError(f"OS_TIMEOUT must be a number of seconds, got {timeout!r}") from None

        settings.update(overrides)
        return cls(**settings)
