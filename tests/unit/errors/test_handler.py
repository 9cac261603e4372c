"""Tests for HTTP response classification."""

import httpx
import pytest
from httpx import Response

from openstack_client_core.errors.exceptions import (
    BadRequestError,
    ClientError,
    ConflictError,
    ErrorKind,
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
from openstack_client_core.errors.handler import classify_response, raise_for_status, request_id_from_headers


@pytest.mark.unit
def test_raise_for_status_success():
    """Any 2xx passes when no expected codes are given."""
    raise_for_status(Response(status_code=200))
    raise_for_status(Response(status_code=201))
    raise_for_status(Response(status_code=204))


@pytest.mark.unit
def test_raise_for_status_expected_codes():
    """Test that only the expected codes pass when they are given."""
    raise_for_status(Response(status_code=202), expected=(202, 204))

    with pytest.raises(UnexpectedStatusError) as exc_info:
        raise_for_status(Response(status_code=200), expected=(202,))

    assert exc_info.value.status_code == 200
    assert exc_info.value.expected == (202,)


@pytest.mark.unit
@pytest.mark.parametrize(
    "status_code, exc_class, kind",
    [
        (400, BadRequestError, "BadRequest"),
        (401, UnauthorizedError, "Unauthorized"),
        (403, ForbiddenError, "Forbidden"),
        (404, NotFoundError, "NotFound"),
        (405, MethodNotAllowedError, "MethodNotAllowed"),
        (408, RequestTimeoutError, "Timeout"),
        (409, ConflictError, "Conflict"),
        (429, TooManyRequestsError, "TooManyRequests"),
        (500, InternalServerError, "InternalServerError"),
        (501, ServiceNotImplementedError, "NotImplemented"),
        (503, ServiceUnavailableError, "ServiceUnavailable"),
        (504, GatewayTimeoutError, "GatewayTimeout"),
        (418, UnexpectedStatusError, "UnexpectedStatus"),
        (502, UnexpectedStatusError, "UnexpectedStatus"),
    ],
)
def test_status_mapping(status_code, exc_class, kind):
    """Test that each status maps to its error class and kind."""
    error = classify_response(Response(status_code=status_code, json={"message": "boom"}))

    assert type(error) is exc_class
    assert error.kind == kind
    assert error.status_code == status_code


@pytest.mark.unit
def test_kind_values_cover_status_errors():
    """Test the string values of status kinds."""
    assert ErrorKind.NOT_FOUND == "NotFound"
    assert ErrorKind.UNEXPECTED_STATUS == "UnexpectedStatus"


@pytest.mark.unit
def test_empty_body_gets_status_line_message():
    """A 404 with no body still produces a non-empty message."""
    error = classify_response(Response(status_code=404))

    assert isinstance(error, NotFoundError)
    assert error.message
    assert "404" in error.message
    assert "Not Found" in error.message


@pytest.mark.unit
def test_unparseable_body_becomes_message():
    """Test that a non-JSON body becomes the message verbatim."""
    error = classify_response(Response(status_code=500, text="<html>Internal Server Error</html>"))

    assert isinstance(error, InternalServerError)
    assert error.message == "<html>Internal Server Error</html>"
    assert error.body == "<html>Internal Server Error</html>"


@pytest.mark.unit
def test_long_body_is_truncated():
    """Test that raw body messages are truncated."""
    error = classify_response(Response(status_code=500, text="x" * 2000))

    assert len(error.message) == 500


@pytest.mark.unit
def test_fault_wrapper_message():
    """Test the {"<name>": {"message": ...}} fault format."""
    response = Response(
        status_code=404,
        json={"itemNotFound": {"message": "Instance abc could not be found.", "code": 404}},
    )

    error = classify_response(response)

    assert error.message == "itemNotFound: Instance abc could not be found."
    assert error.body == {"itemNotFound": {"message": "Instance abc could not be found.", "code": 404}}


@pytest.mark.unit
def test_errors_list_message():
    """Test the {"errors": [...]} format."""
    response = Response(
        status_code=409,
        json={"errors": [{"status": 409, "code": "client", "title": "Conflict", "detail": "Name in use."}]},
    )

    error = classify_response(response)

    assert isinstance(error, ConflictError)
    assert error.message == "Name in use."


@pytest.mark.unit
def test_request_id_from_header():
    """Test that the request id comes from X-OpenStack-Request-Id."""
    response = Response(
        status_code=400,
        headers={"X-OpenStack-Request-Id": "req-abc"},
        json={"badRequest": {"message": "Invalid input", "code": 400}},
    )

    error = classify_response(response)

    assert error.request_id == "req-abc"


@pytest.mark.unit
def test_request_id_header_precedence():
    """Test that X-OpenStack-Request-Id beats the service-specific headers."""
    headers = httpx.Headers({"X-Compute-Request-Id": "req-compute", "X-OpenStack-Request-Id": "req-os"})
    assert request_id_from_headers(headers) == "req-os"
    assert request_id_from_headers(httpx.Headers({"x-request-id": "req-x"})) == "req-x"
    assert request_id_from_headers(httpx.Headers()) is None


@pytest.mark.unit
def test_request_id_from_payload():
    """Test the payload request id as a fallback."""
    response = Response(
        status_code=400,
        json={"errors": [{"title": "Bad", "detail": "bad input", "request_id": "req-body"}]},
    )

    assert classify_response(response).request_id == "req-body"


@pytest.mark.unit
def test_retry_after_parsed():
    """Test that Retry-After seconds are parsed for 429."""
    response = Response(status_code=429, headers={"Retry-After": "60"}, json={"message": "Rate limited"})

    error = classify_response(response)

    assert isinstance(error, TooManyRequestsError)
    assert error.retry_after == 60


@pytest.mark.unit
def test_retry_after_invalid_is_none():
    """Test that an HTTP-date Retry-After is left as None."""
    response = Response(status_code=503, headers={"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"})

    error = classify_response(response)

    assert isinstance(error, ServiceUnavailableError)
    assert error.retry_after is None


@pytest.mark.unit
def test_request_line_recorded():
    """Test that method and URL come from the originating request."""
    request = httpx.Request("DELETE", "https://compute.example.com/v2.1/servers/abc")
    response = Response(status_code=409, request=request)

    error = classify_response(response, expected=[202, 204])

    assert error.method == "DELETE"
    assert error.url == "https://compute.example.com/v2.1/servers/abc"
    assert error.expected == (202, 204)
    assert error.response is response


@pytest.mark.unit
def test_raise_for_status_raises_client_error():
    """Test that raise_for_status raises the classified ClientError."""
    with pytest.raises(ClientError) as exc_info:
        raise_for_status(Response(status_code=403, json={"error": {"message": "Policy forbids", "code": 403}}))

    assert isinstance(exc_info.value, ForbiddenError)
    assert exc_info.value.message == "error: Policy forbids"
