"""Error payload models.

OpenStack services do not agree on an error document format. Known shapes:

- Nova / Cinder style fault wrapper: ``{"itemNotFound": {"message": "...", "code": 404}}``
- Keystone: ``{"error": {"message": "...", "code": 401, "title": "Unauthorized"}}``
- Neutron: ``{"NeutronError": {"type": "...", "message": "...", "detail": ""}}``
- API-WG errors list (Magnum, Ironic): ``{"errors": [{"title": "...", "detail": "...", "code": "..."}]}``
- WSME (older Magnum / Ironic): ``{"error_message": "{\\"faultstring\\": \\"...\\"}"}``
- Flat: ``{"message": "..."}`` and RFC 7807 problem documents
"""

import json
from dataclasses import dataclass
from typing import Any

import httpx

# Fields of RFC 7807 problem details
PROBLEM_FIELDS = frozenset({"type", "title", "status", "detail", "instance"})


@dataclass
class ErrorPayload:
    """Normalized view over a service error document."""

    message: str | None = None
    name: str | None = None  # service-defined error name, e.g. "itemNotFound"
    code: str | None = None
    title: str | None = None
    detail: str | None = None
    request_id: str | None = None
    raw: Any = None

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ErrorPayload | None":
        """Parse the error document of a response.

        Returns:
            ErrorPayload, or None if the body is empty or not JSON.
        """
        if not response.content:
            return None
        try:
            data = json.loads(response.content)
        except (ValueError, UnicodeDecodeError):
            return None
        return cls.from_document(data)

    @classmethod
    def from_document(cls, data: Any) -> "ErrorPayload | None":
        if not isinstance(data, dict) or not data:
            return None

        errors = data.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            first = errors[0]
            return cls(
                message=_text(first.get("detail")) or _text(first.get("title")),
                code=_text(first.get("code")),
                title=_text(first.get("title")),
                detail=_text(first.get("detail")),
                request_id=_text(first.get("request_id")),
                raw=data,
            )

        if "error_message" in data:
            return cls._from_wsme(data)

        if PROBLEM_FIELDS & data.keys() and ("title" in data or "detail" in data):
            return cls(
                message=_text(data.get("detail")) or _text(data.get("title")),
                code=_text(data.get("status")),
                title=_text(data.get("title")),
                detail=_text(data.get("detail")),
                raw=data,
            )

        if len(data) == 1:
            name, inner = next(iter(data.items()))
            if isinstance(inner, dict):
                return cls(
                    message=_text(inner.get("message")) or _text(inner.get("detail")),
                    name=name,
                    code=_text(inner.get("code")),
                    title=_text(inner.get("title")) or _text(inner.get("type")),
                    detail=_text(inner.get("detail")),
                    raw=data,
                )
            if isinstance(inner, str) and inner:
                return cls(message=inner, name=name, raw=data)

        if "message" in data or "faultstring" in data:
            return cls(
                message=_text(data.get("message")) or _text(data.get("faultstring")),
                code=_text(data.get("code")),
                title=_text(data.get("title")),
                raw=data,
            )

        return cls(raw=data)

    @classmethod
    def _from_wsme(cls, data: dict[str, Any]) -> "ErrorPayload":
        inner = data["error_message"]
        if isinstance(inner, str):
            # WSME double-encodes the fault
            try:
                inner = json.loads(inner)
            except ValueError:
                return cls(message=inner or None, raw=data)
        if isinstance(inner, dict):
            return cls(
                message=_text(inner.get("faultstring")) or _text(inner.get("message")),
                code=_text(inner.get("faultcode")),
                detail=_text(inner.get("debuginfo")),
                raw=data,
            )
        return cls(message=_text(inner), raw=data)

    def to_exception_message(self) -> str | None:
        """Build a one-line message, or None if the payload carries no text."""
        text = self.message or self.detail or self.title
        if not text:
            return None
        if self.name and self.name not in text:
            return f"{self.name}: {text}"
        return text


def _text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)
