from __future__ import annotations

import io

import pytest

from oasbind.exceptions import BodyConsumedError
from oasbind.requests import Request
from oasbind.testing import make_request


def test_request_from_url_splits_query() -> None:
    request = Request.from_url("get", "http://example.com/clients/4?limit=5&active=true")
    assert request.method == "GET"
    assert request.path == "/clients/4"
    assert request.query_string == "limit=5&active=true"


def test_request_from_url_defaults_path() -> None:
    request = Request.from_url("GET", "?a=1")
    assert request.path == "/"
    assert request.query_string == "a=1"


def test_header_lookup_is_case_insensitive() -> None:
    request = Request(method="GET", path="/", headers={"Content-Type": "Application/JSON; charset=utf-8"})
    assert request.header("content-type") == "Application/JSON; charset=utf-8"
    assert request.header("missing", "default") == "default"
    assert request.media_type == "application/json"


def test_media_type_without_header() -> None:
    assert Request(method="GET", path="/").media_type == ""


def test_path_param_defaults_to_empty() -> None:
    request = Request(method="GET", path="/", path_params={"id": "7"})
    assert request.path_param("id") == "7"
    assert request.path_param("missing") == ""


def test_body_bytes_read_once() -> None:
    request = Request(method="POST", path="/", body=b"payload")
    assert not request.consumed
    assert request.read_body() == b"payload"
    assert request.consumed
    with pytest.raises(BodyConsumedError):
        request.read_body()


def test_body_stream_read_once() -> None:
    stream = io.BytesIO(b"streamed")
    request = Request(method="POST", path="/", body=stream)
    assert request.read_body() == b"streamed"
    with pytest.raises(BodyConsumedError) as captured:
        request.read_body()
    assert captured.value.status == 400


def test_empty_body() -> None:
    assert Request(method="POST", path="/").read_body() == b""


def test_make_request_encodes_json_and_query() -> None:
    request = make_request("/items?page=2", method="post", query={"id": [1, 2]}, json={"name": "Widget"})
    assert request.method == "POST"
    assert request.query_string == "page=2&id=1&id=2"
    assert request.header("content-type") == "application/json"
    assert request.read_body() == b'{"name":"Widget"}'


def test_make_request_rejects_body_and_json() -> None:
    with pytest.raises(ValueError):
        make_request("/", json={}, body=b"{}")
