"""Request logging transport.

Wraps any sync httpx transport and logs each exchange. Token headers are never
logged.

Example:
    ```python
    import httpx
    from openstack_client_core.transport import LoggingTransport

    transport = LoggingTransport(wrapped_transport=httpx.HTTPTransport())
    client = httpx.Client(transport=transport)
    ```
"""

import logging
import time

import httpx

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = frozenset({"x-auth-token", "x-subject-token", "authorization"})


def redact_headers(headers: httpx.Headers) -> dict[str, str]:
    return {name: ("***" if name.lower() in SENSITIVE_HEADERS else value) for name, value in headers.items()}


class LoggingTransport(httpx.BaseTransport):
    """Log method, URL, status and elapsed time of every request.

    Args:
        wrapped_transport: The underlying transport to wrap
        log_headers: Also log (redacted) request and response headers
    """

    def __init__(self, *, wrapped_transport: httpx.BaseTransport, log_headers: bool = False) -> None:
        self._wrapped_transport = wrapped_transport
        self.log_headers = log_headers

    def __enter__(self):
        self._wrapped_transport.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._wrapped_transport.__exit__(exc_type, exc_val, exc_tb)

    def close(self) -> None:
        self._wrapped_transport.close()

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        if self.log_headers:
            logger.debug(f"Request {request.method} {request.url} headers={redact_headers(request.headers)}")

        start = time.monotonic()
        try:
            response = self._wrapped_transport.handle_request(request)
        except httpx.TransportError as e:
            elapsed = time.monotonic() - start
            logger.warning(f"Request {request.method} {request.url} failed after {elapsed:.3f}s: {e}")
            raise

        elapsed = time.monotonic() - start
        logger.debug(f"Request {request.method} {request.url} -> {response.status_code} in {elapsed:.3f}s")
        if self.log_headers:
            logger.debug(f"Response headers={redact_headers(response.headers)}")
        return response
