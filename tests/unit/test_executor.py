"""Tests for the single-request executor."""

import json

import httpx
import pytest

from openstack_client_core.catalog import Endpoint
from openstack_client_core.errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    UnexpectedStatusError,
    UnreachableError,
    UnsupportedMicroversionError,
)
from openstack_client_core.executor import RequestExecutor, join_url
from openstack_client_core.microversions import MicroversionRange
from openstack_client_core.request import UNSET, RequestDescriptor
from openstack_client_core.testing import create_error_response, create_mock_response

MAGNUM = Endpoint(
    service_type="container-infra",
    url="https://magnum.example.com/v1",
    region="RegionOne",
    microversions=MicroversionRange("1.1", "1.10"),
)


class Recorder:
    """MockTransport handler returning queued responses and recording requests."""

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        return httpx.Response(response.status_code, headers=response.headers, content=response.content)


def make_executor(handler) -> RequestExecutor:
    return RequestExecutor(httpx.Client(transport=httpx.MockTransport(handler)), user_agent="tests/1.0")


@pytest.mark.unit
@pytest.mark.parametrize(
    "base, path, expected",
    [
        ("https://x/v1", "clusters", "https://x/v1/clusters"),
        ("https://x/v1/", "/clusters", "https://x/v1/clusters"),
        ("https://x/v1", "", "https://x/v1"),
        ("https://x/v1", "https://y/v1/clusters?marker=a", "https://y/v1/clusters?marker=a"),
    ],
)
def test_join_url(base, path, expected):
    """Test joining endpoint URLs with relative and absolute paths."""
    assert join_url(base, path) == expected


@pytest.mark.unit
def test_get_sends_standard_headers():
    """Test the token, Accept and User-Agent headers on a GET without a body."""
    recorder = Recorder(create_mock_response(json={"clusters": []}))

    result = make_executor(recorder).execute(RequestDescriptor("GET", "clusters"), MAGNUM, "tok")

    request = recorder.requests[0]
    assert str(request.url) == "https://magnum.example.com/v1/clusters"
    assert request.headers["X-Auth-Token"] == "tok"
    assert request.headers["Accept"] == "application/json"
    assert request.headers["User-Agent"] == "tests/1.0"
    assert "Content-Type" not in request.headers
    assert "OpenStack-API-Version" not in request.headers
    assert result.extract("clusters") == []


@pytest.mark.unit
def test_post_body_selective_omission():
    """Test that UNSET fields are dropped while explicit values and None are sent."""
    recorder = Recorder(create_mock_response(202, json={"uuid": "ng-1"}))
    body = {"name": "ng", "node_count": UNSET, "min_node_count": 0, "merge_labels": False, "labels": None}

    make_executor(recorder).execute(RequestDescriptor("POST", "clusters/c1/nodegroups", body=body), MAGNUM, "tok")

    request = recorder.requests[0]
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.content) == {"name": "ng", "min_node_count": 0, "merge_labels": False, "labels": None}


@pytest.mark.unit
def test_query_params():
    """Test that query options are serialized and UNSET ones dropped."""
    recorder = Recorder(create_mock_response(json={"clusters": []}))
    descriptor = RequestDescriptor("GET", "clusters", params={"limit": 2, "detail": True, "marker": UNSET})

    make_executor(recorder).execute(descriptor, MAGNUM, "tok")

    assert recorder.requests[0].url.params["limit"] == "2"
    assert recorder.requests[0].url.params["detail"] == "true"
    assert "marker" not in recorder.requests[0].url.params


@pytest.mark.unit
def test_microversion_headers():
    """Test that the requested microversion is sent."""
    recorder = Recorder(create_mock_response(json={}))

    make_executor(recorder).execute(RequestDescriptor("GET", "clusters", microversion="1.9"), MAGNUM, "tok")

    assert recorder.requests[0].headers["OpenStack-API-Version"] == "container-infra 1.9"


@pytest.mark.unit
def test_unsupported_microversion_sends_nothing():
    """Test that an unsupported microversion fails before any request."""
    recorder = Recorder(create_mock_response(json={}))

    with pytest.raises(UnsupportedMicroversionError):
        make_executor(recorder).execute(RequestDescriptor("GET", "clusters", microversion="1.12"), MAGNUM, "tok")

    assert recorder.requests == []


@pytest.mark.unit
def test_header_overrides():
    """Test that caller headers override and can remove the defaults."""
    recorder = Recorder(create_mock_response(json={}))
    descriptor = RequestDescriptor("GET", "clusters", headers={"accept": "text/plain", "User-Agent": None})

    make_executor(recorder).execute(descriptor, MAGNUM, "tok")

    request = recorder.requests[0]
    assert request.headers["Accept"] == "text/plain"
    assert request.headers.get("User-Agent") != "tests/1.0"


@pytest.mark.unit
def test_delete_empty_body_is_success():
    """Test that a 204 DELETE with no body succeeds."""
    recorder = Recorder(create_mock_response(204))

    result = make_executor(recorder).execute(RequestDescriptor("DELETE", "clusters/c1"), MAGNUM, "tok")

    assert result.status_code == 204
    assert result.extract() is None


@pytest.mark.unit
def test_unexpected_success_status_is_error():
    """Test that a 2xx outside the expected codes is an error."""
    recorder = Recorder(create_mock_response(200, json={}))

    with pytest.raises(UnexpectedStatusError) as exc_info:
        make_executor(recorder).execute(RequestDescriptor("POST", "clusters", body={}), MAGNUM, "tok")

    assert exc_info.value.expected == (201, 202)


@pytest.mark.unit
def test_error_status_classified():
    """Test that error responses are classified with request id and request line."""
    recorder = Recorder(create_error_response(409, "Node group ng already exists", name="Conflict", request_id="req-7"))

    with pytest.raises(ConflictError) as exc_info:
        make_executor(recorder).execute(RequestDescriptor("POST", "nodegroups", body={}), MAGNUM, "tok")

    assert exc_info.value.request_id == "req-7"
    assert exc_info.value.method == "POST"
    assert exc_info.value.url == "https://magnum.example.com/v1/nodegroups"


@pytest.mark.unit
def test_not_found_empty_body_has_message():
    """Test that a 404 without a body still has a message."""
    recorder = Recorder(create_error_response(404))

    with pytest.raises(NotFoundError) as exc_info:
        make_executor(recorder).execute(RequestDescriptor("GET", "clusters/missing"), MAGNUM, "tok")

    assert exc_info.value.message


@pytest.mark.unit
def test_reauth_on_401_resends_once():
    """Test that a 401 reauthenticates and resends with the new token."""
    recorder = Recorder(create_error_response(401, "expired", name="error"), create_mock_response(json={"ok": True}))
    stale = []

    def reauthenticate(token):
        stale.append(token)
        return "fresh"

    result = make_executor(recorder).execute(
        RequestDescriptor("GET", "clusters"), MAGNUM, "old", reauthenticate=reauthenticate
    )

    assert stale == ["old"]
    assert [r.headers["X-Auth-Token"] for r in recorder.requests] == ["old", "fresh"]
    assert result.extract("ok") is True


@pytest.mark.unit
def test_second_401_is_surfaced():
    """Test that a 401 after reauthentication is raised."""
    recorder = Recorder(create_error_response(401, "nope", name="error"))

    with pytest.raises(UnauthorizedError):
        make_executor(recorder).execute(
            RequestDescriptor("GET", "clusters"), MAGNUM, "old", reauthenticate=lambda token: "fresh"
        )

    assert len(recorder.requests) == 2


@pytest.mark.unit
def test_no_reauth_when_disallowed():
    """Test that allow_reauth=False never calls the reauthentication callback."""
    recorder = Recorder(create_error_response(401, "nope", name="error"))
    calls = []

    with pytest.raises(UnauthorizedError):
        make_executor(recorder).execute(
            RequestDescriptor("GET", "clusters", allow_reauth=False),
            MAGNUM,
            "old",
            reauthenticate=calls.append,
        )

    assert calls == []
    assert len(recorder.requests) == 1


@pytest.mark.unit
def test_bare_url_endpoint():
    """Test a request without a token to a bare endpoint."""
    recorder = Recorder(create_mock_response(json={"versions": []}))

    make_executor(recorder).execute(RequestDescriptor("GET"), "https://magnum.example.com/", None)

    assert str(recorder.requests[0].url) == "https://magnum.example.com/"
    assert "X-Auth-Token" not in recorder.requests[0].headers


@pytest.mark.unit
def test_transport_failure_is_unreachable():
    """Test that a connection failure is reported as unreachable."""
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(UnreachableError) as exc_info:
        make_executor(handler).execute(RequestDescriptor("GET", "clusters"), MAGNUM, "tok")

    assert exc_info.value.url == "https://magnum.example.com/v1/clusters"
