"""Testing helpers."""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import urlencode

from .requests import Request
from .serialization import json_encode


def make_request(
    url: str = "/",
    *,
    method: str = "GET",
    query: Mapping[str, Any] | None = None,
    json: Any | None = None,
    body: bytes | None = None,
    headers: Mapping[str, str] | None = None,
    path_params: Mapping[str, str] | None = None,
) -> Request:
    """Build an in-process :class:`Request` the way a server would hand it over.

    ``query`` is url-encoded with repeated keys for sequence values and appended
    to any query already present in ``url``.
    """

    request_headers = dict(headers or {})
    payload = body
    if json is not None:
        if body is not None:
            raise ValueError("json and body are mutually exclusive")
        payload = json_encode(json)
        request_headers.setdefault("content-type", "application/json")
    if query:
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}{urlencode(query, doseq=True)}"
    return Request.from_url(method, url, headers=request_headers, path_params=path_params, body=payload)
