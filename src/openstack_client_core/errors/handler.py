"""Error classification for HTTP responses."""

import logging
from collections.abc import Iterable

import httpx

from openstack_client_core.errors.exceptions import (
    BadRequestError,
    ClientError,
    ConflictError,
    ForbiddenError,
    GatewayTimeoutError,
    InternalServerError,
    MethodNotAllowedError,
    NotFoundError,
    RequestTimeoutError,
    ServiceNotImplementedError,
    ServiceUnavailableError,
    TooManyRequestsError,
    UnauthorizedError,
    UnexpectedStatusError,
)
from openstack_client_core.errors.models import ErrorPayload

logger = logging.getLogger(__name__)

STATUS_ERRORS: dict[int, type[ClientError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    405: MethodNotAllowedError,
    408: RequestTimeoutError,
    409: ConflictError,
    429: TooManyRequestsError,
    500: InternalServerError,
    501: ServiceNotImplementedError,
    503: ServiceUnavailableError,
    504: GatewayTimeoutError,
}

REQUEST_ID_HEADERS = ("X-OpenStack-Request-Id", "X-Compute-Request-Id", "X-Request-Id")

# Raw body text is truncated to this many characters in messages
MAX_BODY_EXCERPT = 500


def request_id_from_headers(headers: httpx.Headers) -> str | None:
    for name in REQUEST_ID_HEADERS:
        value = headers.get(name)
        if value:
            return value
    return None


def classify_response(
    response: httpx.Response,
    *,
    expected: Iterable[int] = (),
) -> ClientError:
    """Build the structured error for an unexpected HTTP response.

    Never raises: when the body cannot be parsed, the raw body text becomes the
    message, and an empty body falls back to the status line.

    Args:
        response: HTTP response object
        expected: Status codes the caller would have accepted

    Returns:
        ClientError subclass matching the status code
    """
    status_code = response.status_code
    exc_class = STATUS_ERRORS.get(status_code, UnexpectedStatusError)

    payload = ErrorPayload.from_response(response)
    message = payload.to_exception_message() if payload else None
    if not message:
        message = _body_text(response)
    if not message:
        message = f"HTTP {status_code}"
        reason = _reason_phrase(response)
        if reason:
            message += f" {reason}"

    request_id = request_id_from_headers(response.headers)
    if request_id is None and payload is not None:
        request_id = payload.request_id

    method, url = _request_line(response)
    kwargs = {
        "status_code": status_code,
        "method": method,
        "url": url,
        "expected": tuple(expected),
        "response": response,
        "request_id": request_id,
        "body": payload.raw if payload is not None else _body_text(response),
    }

    if exc_class in (TooManyRequestsError, ServiceUnavailableError):
        return exc_class(message, retry_after=_retry_after(response), **kwargs)
    return exc_class(message, **kwargs)


def raise_for_status(response: httpx.Response, expected: Iterable[int] | None = None) -> None:
    """Raise the classified error unless the status is expected.

    Without ``expected``, any 2xx status is accepted.
    """
    expected = tuple(expected) if expected is not None else ()
    if expected:
        if response.status_code in expected:
            return
    elif response.is_success:
        return

    error = classify_response(response, expected=expected)
    logger.debug(f"Classified HTTP {response.status_code} as {error.kind}: {error.message}")
    raise error


def _body_text(response: httpx.Response) -> str | None:
    if not response.content:
        return None
    try:
        text = response.text.strip()
    except (UnicodeDecodeError, LookupError):
        text = response.content.decode("utf-8", errors="replace").strip()
    if not text:
        return None
    return text[:MAX_BODY_EXCERPT]


def _reason_phrase(response: httpx.Response) -> str:
    try:
        return response.reason_phrase
    except (AttributeError, KeyError, ValueError):
        return ""


def _request_line(response: httpx.Response) -> tuple[str | None, str | None]:
    try:
        request = response.request
    except RuntimeError:
        # Response built without a request (e.g. in tests)
        return None, None
    return request.method, str(request.url)


def _retry_after(response: httpx.Response) -> int | None:
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None
