"""Request primitives."""

from __future__ import annotations

import io
from typing import BinaryIO, Mapping
from urllib.parse import urlsplit

from .exceptions import BodyConsumedError


class Request:
    """View of an incoming request whose body stream can be read once."""

    __slots__ = (
        "_body",
        "_consumed",
        "headers",
        "method",
        "path",
        "path_params",
        "query_string",
    )

    def __init__(
        self,
        *,
        method: str,
        path: str,
        headers: Mapping[str, str] | None = None,
        path_params: Mapping[str, str] | None = None,
        query_string: str | None = None,
        body: bytes | BinaryIO | None = None,
    ) -> None:
        self.method = method.upper()
        self.path = path
        self.headers = {k.lower(): v for k, v in (headers or {}).items()}
        self.path_params = dict(path_params or {})
        self.query_string = query_string or ""
        if body is None or isinstance(body, (bytes, bytearray)):
            body = io.BytesIO(bytes(body or b""))
        self._body: BinaryIO = body
        self._consumed = False

    @classmethod
    def from_url(
        cls,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        path_params: Mapping[str, str] | None = None,
        body: bytes | BinaryIO | None = None,
    ) -> "Request":
        """Build a request from ``url``, splitting off its query component."""

        parts = urlsplit(url)
        return cls(
            method=method,
            path=parts.path or "/",
            headers=headers,
            path_params=path_params,
            query_string=parts.query,
            body=body,
        )

    @property
    def consumed(self) -> bool:
        return self._consumed

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)

    @property
    def media_type(self) -> str:
        """Return the ``content-type`` header without its parameters."""

        content_type = self.header("content-type") or ""
        return content_type.split(";", 1)[0].strip().lower()

    def path_param(self, name: str) -> str:
        return self.path_params.get(name, "")

    def read_body(self) -> bytes:
        """Drain the body stream, raising :class:`BodyConsumedError` on a second read."""

        if self._consumed:
            raise BodyConsumedError()
        self._consumed = True
        data = self._body.read()
        return bytes(data or b"")
