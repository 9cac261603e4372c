"""Service catalog and endpoint resolution."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from openstack_client_core.errors.exceptions import EndpointNotFoundError, ProtocolError
from openstack_client_core.microversions import MicroversionRange, check_microversion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Endpoint:
    """A resolved service endpoint."""

    service_type: str
    url: str
    region: str | None = None
    interface: str = "public"
    microversions: MicroversionRange | None = None

    @property
    def supports_microversions(self) -> bool:
        return self.microversions is not None

    @classmethod
    def from_url(cls, url: str, service_type: str = "") -> "Endpoint":
        """Wrap a bare base URL (no catalog entry, no microversion support)."""
        return cls(service_type=service_type, url=url)


@dataclass(frozen=True)
class CatalogEntry:
    service_type: str
    name: str | None = None
    endpoints: tuple[Endpoint, ...] = field(default_factory=tuple)


class _EndpointDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str
    interface: str
    region: str | None = None
    region_id: str | None = None


class _ServiceDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    name: str | None = None
    endpoints: list[_EndpointDocument] = []


_catalog_adapter = TypeAdapter(list[_ServiceDocument])


def normalize_interface(interface: str) -> str:
    """``publicURL`` -> ``public``, ``Internal`` -> ``internal``."""
    value = interface.strip()
    if value.endswith("URL"):
        value = value[: -len("URL")]
    return value.lower()


class ServiceCatalog:
    """Ordered list of catalog entries returned at authentication time.

    Instances are immutable; a catalog re-fetch produces a new instance.
    """

    def __init__(self, entries: Iterable[CatalogEntry] = ()):
        self._entries = tuple(entries)

    @classmethod
    def from_v3(
        cls,
        document: Any,
        microversions: Mapping[str, MicroversionRange] | None = None,
    ) -> "ServiceCatalog":
        """Build a catalog from the ``token.catalog`` list of a Keystone v3 token.

        Raises:
            ProtocolError: If the document does not have the catalog shape.
        """
        try:
            services = _catalog_adapter.validate_python(document)
        except ValidationError as e:
            raise ProtocolError(f"Malformed service catalog: {e}") from e

        microversions = microversions or {}
        entries = []
        for service in services:
            endpoints = tuple(
                Endpoint(
                    service_type=service.type,
                    url=ep.url,
                    region=ep.region_id or ep.region,
                    interface=ep.interface,
                    microversions=microversions.get(service.type),
                )
                for ep in service.endpoints
            )
            entries.append(CatalogEntry(service_type=service.type, name=service.name, endpoints=endpoints))
        return cls(entries)

    @property
    def entries(self) -> tuple[CatalogEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def service_types(self) -> list[str]:
        return [entry.service_type for entry in self._entries]

    def resolve(
        self,
        service_type: str,
        region: str | None = None,
        interface: str = "public",
        microversion: str | None = None,
    ) -> Endpoint:
        """Find the endpoint for a (service type, region, interface) tuple.

        Interfaces match case-insensitively and v2-style names (``publicURL``)
        match their v3 counterparts. When several endpoints match, one whose
        interface string is identical wins, then the first in catalog order.

        Raises:
            EndpointNotFoundError: If nothing matches.
            UnsupportedMicroversionError: If ``microversion`` is given and the
                endpoint does not support it.
        """
        wanted = normalize_interface(interface)
        candidates = [
            endpoint
            for entry in self._entries
            if entry.service_type == service_type
            for endpoint in entry.endpoints
            if (not region or endpoint.region == region) and normalize_interface(endpoint.interface) == wanted
        ]
        if not candidates:
            raise EndpointNotFoundError(
                f"No endpoint found for service '{service_type}' "
                f"(region={region or 'any'}, interface={interface})",
                service_type=service_type,
                region=region,
                interface=interface,
            )

        exact = [endpoint for endpoint in candidates if endpoint.interface == interface]
        endpoint = (exact or candidates)[0]
        if len(candidates) > 1:
            logger.debug(f"{len(candidates)} endpoints match {service_type}/{region}/{interface}, using {endpoint.url}")

        if microversion is not None:
            check_microversion(microversion, endpoint.microversions, service_type=service_type)
        return endpoint
