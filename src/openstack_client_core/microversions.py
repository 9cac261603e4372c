"""Microversion support.

Which microversions a service accepts is configuration supplied by the caller
(a table of service type -> :class:`MicroversionRange`), not something the core
knows about. The core only checks a requested version against that range and
emits the right headers.
"""

from dataclasses import dataclass

from openstack_client_core.errors.exceptions import UnsupportedMicroversionError

LATEST = "latest"

# Legacy per-service headers, sent in addition to OpenStack-API-Version
LEGACY_HEADERS: dict[str, str] = {
    "compute": "X-OpenStack-Nova-API-Version",
    "sharev2": "X-OpenStack-Manila-API-Version",
    "volume": "X-OpenStack-Volume-API-Version",
    "block-storage": "X-OpenStack-Volume-API-Version",
    "baremetal": "X-OpenStack-Ironic-API-Version",
    "baremetal-introspection": "X-OpenStack-Ironic-Inspector-API-Version",
}

API_VERSION_HEADER = "OpenStack-API-Version"


def parse_version(version: str) -> tuple[int, int]:
    """Parse ``"X.Y"`` into a comparable tuple.

    Raises:
        ValueError: If the string is not a ``major.minor`` version.
    """
    major, sep, minor = version.strip().partition(".")
    if not sep:
        raise ValueError(f"Invalid microversion {version!r}: expected 'major.minor'")
    try:
        return int(major), int(minor)
    except ValueError:
        raise ValueError(f"Invalid microversion {version!r}: expected 'major.minor'") from None


@dataclass(frozen=True)
class MicroversionRange:
    """Inclusive range of microversions an endpoint accepts."""

    min_version: str
    max_version: str

    def __post_init__(self):
        if parse_version(self.min_version) > parse_version(self.max_version):
            raise ValueError(f"min_version {self.min_version} is greater than max_version {self.max_version}")

    def __contains__(self, version: str) -> bool:
        if version == LATEST:
            return True
        try:
            parsed = parse_version(version)
        except ValueError:
            return False
        return parse_version(self.min_version) <= parsed <= parse_version(self.max_version)


def check_microversion(
    microversion: str,
    supported: MicroversionRange | None,
    *,
    service_type: str = "",
) -> None:
    """Raise UnsupportedMicroversionError unless ``supported`` includes ``microversion``."""
    if supported is None:
        raise UnsupportedMicroversionError(
            f"Endpoint for service '{service_type}' does not support microversions "
            f"(requested {microversion})",
            microversion=microversion,
        )
    if microversion not in supported:
        raise UnsupportedMicroversionError(
            f"Microversion {microversion} is outside the supported range "
            f"{supported.min_version}-{supported.max_version} for service '{service_type}'",
            microversion=microversion,
        )


def microversion_headers(service_type: str, microversion: str) -> dict[str, str]:
    headers = {}
    legacy = LEGACY_HEADERS.get(service_type)
    if legacy:
        headers[legacy] = microversion
    if service_type:
        headers[API_VERSION_HEADER] = f"{service_type} {microversion}"
    return headers
