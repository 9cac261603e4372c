"""Request descriptors and body serialization.

Optional fields are tri-state: unset, or set to a value. Option structs mark
unset fields with the :data:`UNSET` sentinel (dataclasses) or leave them
unassigned (pydantic models); either way they are dropped from the serialized
body, while explicit ``0``, ``False``, ``""`` and ``None`` are sent as-is.

Example:
    ```python
    from dataclasses import dataclass
    from openstack_client_core.request import UNSET, Unset, build_body


    @dataclass
    class CreateOpts:
        name: str
        node_count: int | Unset = UNSET
        floating_ip_enabled: bool | Unset = UNSET


    build_body(CreateOpts(name="k8s", floating_ip_enabled=False))
    # {"name": "k8s", "floating_ip_enabled": False}
    ```
"""

import dataclasses
from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from typing import Any, Final

from pydantic import BaseModel
from pydantic_core import to_jsonable_python


class Unset:
    """Type of the :data:`UNSET` sentinel."""

    _instance: "Unset | None" = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


UNSET: Final = Unset()

DEFAULT_OK_CODES: dict[str, tuple[int, ...]] = {
    "GET": (200,),
    "POST": (201, 202),
    "PUT": (201, 202),
    "PATCH": (200, 202, 204),
    "DELETE": (202, 204),
    "HEAD": (204,),
}

# Statuses after which an empty body is normal
NO_BODY_STATUSES = frozenset({202, 204, 205})


def is_unset(value: Any) -> bool:
    return value is UNSET


def build_body(value: Any, *, omit_unset: bool = True) -> Any:
    """Serialize an option struct into a JSON-compatible document.

    Args:
        value: Mapping, dataclass instance, pydantic model, list or scalar.
        omit_unset: Drop unset fields (default). When False, UNSET dataclass
            fields and mapping values are serialized as ``null``, while
            unassigned pydantic fields are dumped with their declared defaults.

    Returns:
        JSON-compatible document (dicts, lists, str, int, float, bool, None)
    """
    if value is UNSET:
        return None
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_unset=omit_unset)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        document = {}
        for f in dataclasses.fields(value):
            item = getattr(value, f.name)
            if item is UNSET and omit_unset:
                continue
            document[f.metadata.get("json", f.name)] = build_body(item, omit_unset=omit_unset)
        return document
    if isinstance(value, Mapping):
        return {
            str(key): build_body(item, omit_unset=omit_unset)
            for key, item in value.items()
            if not (item is UNSET and omit_unset)
        }
    if isinstance(value, (list, tuple)):
        return [build_body(item, omit_unset=omit_unset) for item in value]
    return to_jsonable_python(value)


def build_query(value: Any) -> dict[str, str | list[str]]:
    """Serialize list options into query parameters, omitting unset fields.

    Booleans become ``"true"``/``"false"``, lists become repeated keys and
    ``None`` values are dropped.
    """
    if value is None or value is UNSET:
        return {}
    document = build_body(value)
    if not isinstance(document, dict):
        raise TypeError(f"Query options must serialize to a mapping, got {type(document).__name__}")

    params: dict[str, str | list[str]] = {}
    for key, item in document.items():
        if item is None:
            continue
        if isinstance(item, list):
            params[key] = [_query_value(v) for v in item if v is not None]
        else:
            params[key] = _query_value(item)
    return params


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass
class RequestDescriptor:
    """Everything needed to issue a single request against an endpoint."""

    method: str
    path: str = ""
    body: Any = UNSET
    params: Any = None
    headers: Mapping[str, str | None] = field(default_factory=dict)
    ok_codes: Collection[int] | None = None
    omit_unset: bool = True
    microversion: str | None = None
    allow_reauth: bool = True

    def __post_init__(self):
        self.method = self.method.upper()

    @property
    def has_body(self) -> bool:
        return self.body is not UNSET

    @property
    def expected_statuses(self) -> tuple[int, ...]:
        if self.ok_codes is not None:
            return tuple(self.ok_codes)
        return DEFAULT_OK_CODES.get(self.method, (200,))

    @property
    def allows_empty_body(self) -> bool:
        return bool(NO_BODY_STATUSES.intersection(self.expected_statuses))

    def json_body(self) -> Any:
        return build_body(self.body, omit_unset=self.omit_unset)

    def query(self) -> dict[str, str | list[str]]:
        return build_query(self.params)
