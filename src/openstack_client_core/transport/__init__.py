"""Transport layers wrapping httpx transports.

Example:
    ```python
    import httpx
    from openstack_client_core.transport import create_transport

    client = httpx.Client(transport=create_transport(verify=True, log_requests=True))
    ```
"""

import ssl

import httpx

from openstack_client_core.transport.request_logging import LoggingTransport, redact_headers


def create_transport(
    *,
    verify: bool | str = True,
    log_requests: bool = True,
    wrapped_transport: httpx.BaseTransport | None = None,
) -> httpx.BaseTransport:
    """Build the transport stack used by ProviderClient.

    A string ``verify`` is the path of a CA bundle (``OS_CACERT``).
    """
    transport = wrapped_transport or httpx.HTTPTransport(verify=ssl_context(verify))
    if log_requests:
        transport = LoggingTransport(wrapped_transport=transport)
    return transport


def ssl_context(verify: bool | str) -> bool | ssl.SSLContext:
    """TLS verification argument for httpx: a CA bundle path becomes an SSLContext."""
    if isinstance(verify, str):
        return ssl.create_default_context(cafile=verify)
    return verify


__all__ = ["LoggingTransport", "create_transport", "redact_headers", "ssl_context"]
