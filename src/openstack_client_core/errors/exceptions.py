"""Structured exceptions for the client core.

Every failure surfaced by the core is an :class:`OpenStackError` carrying a
machine-checkable :class:`ErrorKind`, the HTTP status (if any), the request id
reported by the service (if any) and the decoded error body.
"""

from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx


class ErrorKind(StrEnum):
    """Kinds of errors produced by the core."""

    AUTHENTICATION = "Authentication"
    UNREACHABLE = "Unreachable"
    PROTOCOL = "Protocol"
    ENDPOINT_NOT_FOUND = "EndpointNotFound"
    UNSUPPORTED_MICROVERSION = "UnsupportedMicroversion"
    DECODE = "Decode"
    CANCELLED = "Cancelled"

    # Status-derived kinds
    BAD_REQUEST = "BadRequest"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "NotFound"
    METHOD_NOT_ALLOWED = "MethodNotAllowed"
    TIMEOUT = "Timeout"
    CONFLICT = "Conflict"
    TOO_MANY_REQUESTS = "TooManyRequests"
    INTERNAL_SERVER_ERROR = "InternalServerError"
    NOT_IMPLEMENTED = "NotImplemented"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    GATEWAY_TIMEOUT = "GatewayTimeout"
    UNEXPECTED_STATUS = "UnexpectedStatus"


class OpenStackError(Exception):
    """Base exception for all errors raised by the client core."""

    kind: ErrorKind = ErrorKind.PROTOCOL

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        request_id: str | None = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.request_id = request_id
        self.body = body

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": str(self.kind),
            "message": self.message,
            "status_code": self.status_code,
            "request_id": self.request_id,
            "body": self.body,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(kind={str(self.kind)!r}, status_code={self.status_code!r}, "
            f"request_id={self.request_id!r}, message={self.message!r})"
        )


class AuthenticationError(OpenStackError):
    """Identity service rejected the credentials, or reauthentication is not possible."""

    kind = ErrorKind.AUTHENTICATION


class UnreachableError(OpenStackError):
    """Network or connection failure (DNS, refused connection, timeout)."""

    kind = ErrorKind.UNREACHABLE

    def __init__(self, message: str, *, url: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.url = url


class ProtocolError(OpenStackError):
    """A well-formed response was required but the server sent something else."""

    kind = ErrorKind.PROTOCOL


class EndpointNotFoundError(OpenStackError):
    """No catalog entry matches the requested service type, region and interface."""

    kind = ErrorKind.ENDPOINT_NOT_FOUND

    def __init__(
        self,
        message: str,
        *,
        service_type: str | None = None,
        region: str | None = None,
        interface: str | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.service_type = service_type
        self.region = region
        self.interface = interface


class UnsupportedMicroversionError(OpenStackError):
    """The target endpoint cannot honour the requested microversion."""

    kind = ErrorKind.UNSUPPORTED_MICROVERSION

    def __init__(self, message: str, *, microversion: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.microversion = microversion


class DecodeError(OpenStackError):
    """Response body is not valid JSON or does not match the requested shape."""

    kind = ErrorKind.DECODE


class RequestCancelledError(OpenStackError):
    """Pagination was cancelled before the next page was fetched."""

    kind = ErrorKind.CANCELLED


class ClientError(OpenStackError):
    """Error derived from a non-success HTTP status code."""

    kind = ErrorKind.UNEXPECTED_STATUS

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        method: str | None = None,
        url: str | None = None,
        expected: tuple[int, ...] = (),
        response: "httpx.Response | None" = None,
        **kwargs,
    ):
        super().__init__(message, status_code=status_code, **kwargs)
        self.method = method
        self.url = url
        self.expected = tuple(expected)
        self.response = response

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(method=self.method, url=self.url, expected=list(self.expected))
        return data


class BadRequestError(ClientError):
    """400 Bad Request."""

    kind = ErrorKind.BAD_REQUEST


class UnauthorizedError(ClientError):
    """401 Unauthorized."""

    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(ClientError):
    """403 Forbidden."""

    kind = ErrorKind.FORBIDDEN


class NotFoundError(ClientError):
    """404 Not Found."""

    kind = ErrorKind.NOT_FOUND


class MethodNotAllowedError(ClientError):
    """405 Method Not Allowed."""

    kind = ErrorKind.METHOD_NOT_ALLOWED


class RequestTimeoutError(ClientError):
    """408 Request Timeout."""

    kind = ErrorKind.TIMEOUT


class ConflictError(ClientError):
    """409 Conflict."""

    kind = ErrorKind.CONFLICT


class TooManyRequestsError(ClientError):
    """429 Too Many Requests."""

    kind = ErrorKind.TOO_MANY_REQUESTS

    def __init__(self, message: str, retry_after: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class InternalServerError(ClientError):
    """500 Internal Server Error."""

    kind = ErrorKind.INTERNAL_SERVER_ERROR


class ServiceNotImplementedError(ClientError):
    """501 Not Implemented."""

    kind = ErrorKind.NOT_IMPLEMENTED


class ServiceUnavailableError(ClientError):
    """503 Service Unavailable."""

    kind = ErrorKind.SERVICE_UNAVAILABLE

    def __init__(self, message: str, retry_after: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class GatewayTimeoutError(ClientError):
    """504 Gateway Timeout."""

    kind = ErrorKind.GATEWAY_TIMEOUT


class UnexpectedStatusError(ClientError):
    """Any other status that was not among the expected ones."""

    kind = ErrorKind.UNEXPECTED_STATUS
