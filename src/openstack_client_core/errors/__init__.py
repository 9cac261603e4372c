"""Error taxonomy and HTTP error classification."""

from openstack_client_core.errors.exceptions import (
    AuthenticationError,
    BadRequestError,
    ClientError,
    ConflictError,
    DecodeError,
    EndpointNotFoundError,
    ErrorKind,
    ForbiddenError,
    GatewayTimeoutError,
    InternalServerError,
    MethodNotAllowedError,
    NotFoundError,
    OpenStackError,
    ProtocolError,
    RequestCancelledError,
    RequestTimeoutError,
    ServiceNotImplementedError,
    ServiceUnavailableError,
    TooManyRequestsError,
    UnauthorizedError,
    UnexpectedStatusError,
    UnreachableError,
    UnsupportedMicroversionError,
)
from openstack_client_core.errors.handler import classify_response, raise_for_status, request_id_from_headers
from openstack_client_core.errors.models import ErrorPayload

__all__ = [
    "AuthenticationError",
    "BadRequestError",
    "ClientError",
    "ConflictError",
    "DecodeError",
    "EndpointNotFoundError",
    "ErrorKind",
    "ErrorPayload",
    "ForbiddenError",
    "GatewayTimeoutError",
    "InternalServerError",
    "MethodNotAllowedError",
    "NotFoundError",
    "OpenStackError",
    "ProtocolError",
    "RequestCancelledError",
    "RequestTimeoutError",
    "ServiceNotImplementedError",
    "ServiceUnavailableError",
    "TooManyRequestsError",
    "UnauthorizedError",
    "UnexpectedStatusError",
    "UnreachableError",
    "UnsupportedMicroversionError",
    "classify_response",
    "raise_for_status",
    "request_id_from_headers",
]
