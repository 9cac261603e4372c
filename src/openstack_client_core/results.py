"""Result envelope for completed requests.

A :class:`Result` keeps the raw status, headers and body of a response and
decodes the body lazily into whatever shape the caller asks for:

```python
@dataclass
class NodeGroup:
    uuid: str
    name: str
    role: str


result = client.get(f"clusters/{cluster_id}/nodegroups/{ng_id}")
node_group = result.extract_into(NodeGroup)
print(result.request_id, node_group.role)
```
"""

import json
from functools import lru_cache
from typing import Any, TypeVar, get_origin, overload

import httpx
from pydantic import TypeAdapter, ValidationError

from openstack_client_core.errors.exceptions import DecodeError
from openstack_client_core.errors.handler import request_id_from_headers

T = TypeVar("T")

_MISSING = object()

_CONTAINER_TYPES = (list, tuple, set, frozenset, dict)


@lru_cache(maxsize=256)
def _adapter(shape: Any) -> TypeAdapter:
    return TypeAdapter(shape)


def _get_adapter(shape: Any) -> TypeAdapter:
    try:
        return _adapter(shape)
    except TypeError:
        # Unhashable shape
        return TypeAdapter(shape)


def zero_value(shape: Any) -> Any:
    """Zero value of a shape: an empty container, an all-defaults model, or None."""
    origin = get_origin(shape) or shape
    if isinstance(origin, type) and issubclass(origin, _CONTAINER_TYPES):
        return origin()
    if shape is Any or shape is object:
        return None
    try:
        return _get_adapter(shape).validate_python({})
    except (ValidationError, TypeError):
        return None


class Result:
    """Completed request/response pair with deferred, memoized decoding."""

    def __init__(self, response: httpx.Response, *, allow_empty: bool = False):
        self.response = response
        self.allow_empty = allow_empty
        self._document: Any = _MISSING
        self._decoded: dict[tuple[Any, str | None], Any] = {}

    def __repr__(self) -> str:
        return f"<Result [{self.status_code}] {self.method} {self.url}>"

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.response.headers

    @property
    def body(self) -> bytes:
        return self.response.content

    @property
    def method(self) -> str | None:
        try:
            return self.response.request.method
        except RuntimeError:
            return None

    @property
    def url(self) -> str | None:
        try:
            return str(self.response.request.url)
        except RuntimeError:
            return None

    @property
    def request_id(self) -> str | None:
        return request_id_from_headers(self.headers)

    @property
    def location(self) -> str | None:
        return self.headers.get("Location")

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name, default)

    @property
    def is_empty(self) -> bool:
        return not self.body.strip()

    def json(self) -> Any:
        """Decode the body as JSON (once).

        Raises:
            DecodeError: If the body is not JSON, or is empty when an empty
                body was not acceptable.
        """
        if self._document is not _MISSING:
            return self._document

        if self.is_empty:
            if not self.allow_empty:
                raise self._decode_error(f"Empty response body (HTTP {self.status_code})")
            self._document = None
            return None

        try:
            self._document = json.loads(self.body)
        except (ValueError, UnicodeDecodeError) as e:
            raise self._decode_error(f"Response body is not valid JSON: {e}") from e
        return self._document

    @overload
    def extract_into(self, shape: type[T], key: str | None = None) -> T: ...

    @overload
    def extract_into(self, shape: Any, key: str | None = None) -> Any: ...

    def extract_into(self, shape, key=None):
        """Decode the body into ``shape``, optionally under the top-level ``key``.

        The decoded value is cached per (shape, key); repeated calls return the
        same object without re-parsing.

        Validation uses pydantic's default lax mode: ISO timestamps become
        ``datetime`` values and a numeric string such as ``"3"`` is coerced into
        an ``int`` field. Values that cannot be coerced raise DecodeError.

        Raises:
            DecodeError: If the body is not JSON, ``key`` is missing, or the
                document does not match ``shape``.
        """
        try:
            cache_key = (shape, key)
            hash(cache_key)
        except TypeError:
            cache_key = None

        if cache_key is not None and cache_key in self._decoded:
            return self._decoded[cache_key]

        document = self.json()
        if document is None and self.allow_empty:
            value = zero_value(shape)
        else:
            if key is not None:
                if not isinstance(document, dict) or key not in document:
                    raise self._decode_error(f"Response body has no '{key}' key")
                document = document[key]
            try:
                value = _get_adapter(shape).validate_python(document)
            except ValidationError as e:
                raise self._decode_error(f"Response body does not match {_shape_name(shape)}: {e}") from e

        if cache_key is not None:
            self._decoded[cache_key] = value
        return value

    def extract(self, key: str | None = None) -> Any:
        """Raw decoded document, or its ``key`` member."""
        return self.extract_into(Any, key)

    def _decode_error(self, message: str) -> DecodeError:
        return DecodeError(
            message,
            status_code=self.status_code,
            request_id=self.request_id,
            body=self.body[:500].decode("utf-8", errors="replace"),
        )


def _shape_name(shape: Any) -> str:
    return getattr(shape, "__name__", None) or repr(shape)
