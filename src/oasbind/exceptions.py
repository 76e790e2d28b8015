"""Binding exception types."""

from __future__ import annotations

from typing import Any

from .http import Status, reason_phrase
from .serialization import json_encode


class OasBindError(Exception):
    """Base error type."""


class UsageError(OasBindError, TypeError):
    """The decode target is not a record instance."""


class TagSyntaxError(OasBindError, ValueError):
    """A field tag contains a token the grammar does not recognize."""

    def __init__(self, tag: str, token: str) -> None:
        super().__init__(f"invalid tag {tag!r}: unknown setting {token!r}")
        self.tag = tag
        self.token = token


class HTTPError(OasBindError):
    """Structured HTTP error that is msgspec serializable."""

    def __init__(self, status: int, detail: Any) -> None:
        super().__init__(status, detail)
        self.status = status
        self.detail = detail

    def __str__(self) -> str:
        if isinstance(self.detail, str):
            return self.detail
        return f"{self.status} {reason_phrase(self.status)}: {self.detail!r}"

    def to_response_body(self) -> bytes:
        return json_encode({"error": {"status": self.status, "detail": self.detail}})


class RequiredParamError(HTTPError):
    """A required query parameter is missing from the request."""

    def __init__(self, name: str) -> None:
        super().__init__(Status.BAD_REQUEST, f"query param '{name}' is required")
        self.name = name


class CoercionError(HTTPError):
    """A raw value could not be converted into the field's type."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(Status.BAD_REQUEST, f"{source}: {reason}")
        self.source = source
        self.reason = reason


class BodyDecodeError(HTTPError):
    """The request body could not be decoded into the body field."""

    def __init__(self, body_format: str, reason: str) -> None:
        super().__init__(Status.BAD_REQUEST, f"{body_format} body: {reason}")
        self.body_format = body_format


class BodyConsumedError(HTTPError):
    """The request body stream was already read."""

    def __init__(self) -> None:
        super().__init__(Status.BAD_REQUEST, "request body already consumed")


class HeaderNotImplementedError(HTTPError):
    """Header-origin fields are not supported."""

    def __init__(self, name: str) -> None:
        super().__init__(Status.NOT_IMPLEMENTED, "unmarshaling header is not implemented")
        self.name = name


class UnsupportedBodyFormatError(HTTPError, ValueError):
    """The body format is neither json nor xml."""

    def __init__(self, body_format: str) -> None:
        super().__init__(Status.UNSUPPORTED_MEDIA_TYPE, f"unsupported body format {body_format!r}")
        self.body_format = body_format
