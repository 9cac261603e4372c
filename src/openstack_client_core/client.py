"""Service clients bound to one catalog endpoint."""

import threading
from collections.abc import Collection, Mapping
from typing import Any

from openstack_client_core.catalog import Endpoint
from openstack_client_core.executor import join_url
from openstack_client_core.microversions import check_microversion
from openstack_client_core.pagination import LinkExtractor, Pager, next_field
from openstack_client_core.provider import ProviderClient
from openstack_client_core.request import UNSET, RequestDescriptor
from openstack_client_core.results import Result


class ServiceClient:
    """Client for one service endpoint, sharing its provider's session.

    Per-resource modules build on this class: they turn their option structs
    into request bodies and call :meth:`get`, :meth:`post`, ... or
    :meth:`paginate`.

    Args:
        provider: Authenticated session owner
        endpoint: Resolved endpoint for the service
        microversion: Microversion sent with every request unless overridden
        resource_base: Base URL for resources if it differs from the endpoint URL
    """

    def __init__(
        self,
        provider: ProviderClient,
        endpoint: Endpoint,
        *,
        microversion: str | None = None,
        resource_base: str | None = None,
    ) -> None:
        if microversion is not None:
            check_microversion(microversion, endpoint.microversions, service_type=endpoint.service_type)
        self.provider = provider
        self.endpoint = endpoint
        self.microversion = microversion
        self.resource_base = resource_base

    def __repr__(self) -> str:
        return f"<ServiceClient {self.endpoint.service_type} {self.endpoint.url}>"

    @property
    def service_type(self) -> str:
        return self.endpoint.service_type

    @property
    def base_url(self) -> str:
        return self.resource_base or self.endpoint.url

    def service_url(self, *parts: str) -> str:
        """Absolute URL of a resource path, e.g. ``service_url("clusters", cluster_id)``."""
        return join_url(self.base_url, "/".join(str(part).strip("/") for part in parts))

    def request(
        self,
        method: str,
        path: str = "",
        *,
        body: Any = UNSET,
        params: Any = None,
        headers: Mapping[str, str | None] | None = None,
        ok_codes: Collection[int] | None = None,
        omit_unset: bool = True,
        microversion: str | None = None,
        allow_reauth: bool = True,
    ) -> Result:
        descriptor = RequestDescriptor(
            method=method,
            path=path if path.startswith(("http://", "https://")) else self.service_url(path),
            body=body,
            params=params,
            headers=dict(headers or {}),
            ok_codes=ok_codes,
            omit_unset=omit_unset,
            microversion=microversion if microversion is not None else self.microversion,
            allow_reauth=allow_reauth,
        )
        return self.provider.request(descriptor, self.endpoint)

    def get(self, path: str = "", **kwargs) -> Result:
        return self.request("GET", path, **kwargs)

    def post(self, path: str = "", body: Any = UNSET, **kwargs) -> Result:
        return self.request("POST", path, body=body, **kwargs)

    def put(self, path: str = "", body: Any = UNSET, **kwargs) -> Result:
        return self.request("PUT", path, body=body, **kwargs)

    def patch(self, path: str = "", body: Any = UNSET, **kwargs) -> Result:
        return self.request("PATCH", path, body=body, **kwargs)

    def delete(self, path: str = "", **kwargs) -> Result:
        return self.request("DELETE", path, **kwargs)

    def head(self, path: str = "", **kwargs) -> Result:
        return self.request("HEAD", path, **kwargs)

    def paginate(
        self,
        path: str,
        *,
        items_key: str | None = None,
        link_extractor: LinkExtractor | None = None,
        params: Any = None,
        cancel_event: threading.Event | None = None,
        **kwargs,
    ) -> Pager:
        """Pager over a collection; the first page is fetched on first iteration.

        ``params`` only apply to the first page; later pages use the server's links.
        Pages are expected to return 200 unless ``ok_codes`` says otherwise.
        """
        ok_codes = kwargs.pop("ok_codes", (200,))
        first_page_params = params

        def fetch(url: str) -> Result:
            nonlocal first_page_params
            page_params, first_page_params = first_page_params, None
            return self.get(url, params=page_params, ok_codes=ok_codes, **kwargs)

        return Pager(
            fetch,
            self.service_url(path),
            link_extractor=link_extractor or next_field("next"),
            items_key=items_key,
            cancel_event=cancel_event,
        )


def new_service_client(
    provider: ProviderClient,
    service_type: str,
    *,
    region: str | None = None,
    interface: str | None = None,
    microversion: str | None = None,
) -> ServiceClient:
    """Resolve ``service_type`` from the provider's catalog and bind a ServiceClient to it."""
    endpoint = provider.resolve_endpoint(service_type, region=region, interface=interface, microversion=microversion)
    return ServiceClient(provider, endpoint, microversion=microversion)
