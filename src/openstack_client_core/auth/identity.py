"""Keystone v3 token acquisition."""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from openstack_client_core.auth.options import AuthOptions
from openstack_client_core.catalog import ServiceCatalog
from openstack_client_core.errors.exceptions import (
    AuthenticationError,
    ForbiddenError,
    ProtocolError,
    UnauthorizedError,
    UnreachableError,
)
from openstack_client_core.errors.handler import raise_for_status, request_id_from_headers
from openstack_client_core.microversions import MicroversionRange

logger = logging.getLogger(__name__)

SUBJECT_TOKEN_HEADER = "X-Subject-Token"


class _Reference(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    name: str | None = None


class _TokenDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    expires_at: datetime
    catalog: list[Any] = []
    user: _Reference | None = None
    project: _Reference | None = None


class _TokenResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    token: _TokenDocument


@dataclass(frozen=True)
class AuthResult:
    """Token and catalog snapshot returned by the identity service."""

    token: str = field(repr=False)
    expires_at: datetime
    catalog: ServiceCatalog
    user_id: str | None = None
    project_id: str | None = None


def token_url(identity_endpoint: str) -> str:
    """``https://keystone:5000`` -> ``https://keystone:5000/v3/auth/tokens``."""
    base = identity_endpoint.rstrip("/")
    if not base.endswith("/v3"):
        base += "/v3"
    return f"{base}/auth/tokens"


class IdentityV3Client:
    """Exchange AuthOptions for a token and service catalog.

    Args:
        http: httpx client used for the identity call
        user_agent: Value of the User-Agent header
        microversions: Per-service microversion ranges attached to catalog endpoints
    """

    def __init__(
        self,
        http: httpx.Client,
        *,
        user_agent: str | None = None,
        microversions: Mapping[str, MicroversionRange] | None = None,
    ) -> None:
        self.http = http
        self.user_agent = user_agent
        self.microversions = dict(microversions or {})

    def authenticate(self, options: AuthOptions) -> AuthResult:
        """POST the token request and parse the response.

        Raises:
            AuthenticationError: Identity rejected the credentials (401/403)
            UnreachableError: Identity endpoint could not be reached
            ProtocolError: Response lacks the token, expiry or catalog
            ClientError: Any other unexpected status
        """
        url = token_url(options.identity_endpoint)
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent

        try:
            body = options.to_token_request()
        except ValueError as e:
            raise AuthenticationError(str(e)) from e

        logger.debug(f"Requesting token from {url} (method={options.method})")
        try:
            response = self.http.post(url, headers=headers, content=json.dumps(body).encode("utf-8"))
        except httpx.TransportError as e:
            raise UnreachableError(f"Identity endpoint {url} unreachable: {e}", url=url) from e

        try:
            raise_for_status(response, expected=(200, 201))
        except (UnauthorizedError, ForbiddenError) as error:
            raise AuthenticationError(
                f"Authentication failed: {error.message}",
                status_code=response.status_code,
                request_id=error.request_id,
                body=error.body,
            ) from error

        return self._parse(response)

    def _parse(self, response: httpx.Response) -> AuthResult:
        request_id = request_id_from_headers(response.headers)
        token = response.headers.get(SUBJECT_TOKEN_HEADER)
        if not token:
            raise ProtocolError(
                f"Identity response is missing the {SUBJECT_TOKEN_HEADER} header",
                status_code=response.status_code,
                request_id=request_id,
            )

        try:
            document = _TokenResponse.model_validate_json(response.content).token
        except ValidationError as e:
            raise ProtocolError(
                f"Malformed identity response: {e}",
                status_code=response.status_code,
                request_id=request_id,
                body=response.text[:500],
            ) from e

        expires_at = document.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)

        catalog = ServiceCatalog.from_v3(document.catalog, self.microversions)
        logger.debug(f"Obtained token expiring at {expires_at.isoformat()} with {len(catalog)} catalog entries")
        return AuthResult(
            token=token,
            expires_at=expires_at,
            catalog=catalog,
            user_id=document.user.id if document.user else None,
            project_id=document.project.id if document.project else None,
        )
