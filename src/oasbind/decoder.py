"""Decoding of HTTP requests into records.

Implementation follows the OpenAPI 3 parameter serialization rules::

    class ListOrders(msgspec.Struct):
        exploded_ids: Annotated[list[int], oas("id")] = []  # ?id=1&id=2&id=3
        imploded_ids: Annotated[list[int], oas("ids,implode")] = []  # ?ids=1,2,3
        search: str = ""  # ?search=foobar
        client: Annotated[Client | None, oas(",body,json")] = None

    decode(request, target := ListOrders())
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Callable, Mapping, Sequence

import lxml.etree as LET
import msgspec

from .exceptions import (
    BodyDecodeError,
    CoercionError,
    HeaderNotImplementedError,
    RequiredParamError,
    UnsupportedBodyFormatError,
    UsageError,
)
from .fields import BoundField, Owner, walk
from .query import QueryIndex, resolve
from .requests import Request
from .serialization import convert, xml_decode
from .tags import BodyFormat, Origin, Style
from .typing_utils import coerce, is_record, strip_annotated

logger = logging.getLogger(__name__)

PathValue = Callable[[Request, str], str]


def request_path_value(request: Request, name: str) -> str:
    """Read ``name`` from the path parameters captured by the router."""

    return request.path_param(name)


class DecoderConfig(msgspec.Struct, frozen=True):
    """Defaults applied to every field a :class:`Decoder` binds."""

    style: Style = Style.FORM
    exploded: bool = True
    path_value: PathValue = request_path_value


class Decoder:
    """Bind path, query and body values of a :class:`Request` onto a record."""

    __slots__ = ("config",)

    def __init__(self, config: DecoderConfig | None = None, **overrides: Any) -> None:
        config = config or DecoderConfig()
        if overrides:
            config = msgspec.structs.replace(config, **overrides)
        if not isinstance(config.style, Style):
            try:
                style = Style(config.style)
            except ValueError as exc:
                raise UsageError(f"unknown query style {config.style!r}") from exc
            config = msgspec.structs.replace(config, style=style)
        self.config = config

    def decode(self, request: Request, target: Any) -> Any:
        """Populate ``target`` in place and return it.

        Fields are processed in declaration order and decoding stops at the
        first failure; fields bound before it keep their new values.
        """

        if isinstance(target, type) or not is_record(type(target)):
            raise UsageError(f"call of decode passes {type(target).__name__} instead of a record instance")
        logger.debug("decoding %s from %s %s", type(target).__name__, request.method, request.path)
        index = QueryIndex.parse(request.query_string)
        self._decode_fields(request, Owner(type(target), instance=target), index)
        return target

    def _decode_fields(self, request: Request, owner: Owner, index: QueryIndex, parent: str = "") -> None:
        for field in walk(owner, style=self.config.style, exploded=self.config.exploded):
            try:
                self._decode_field(request, field, index, parent)
            except Exception as exc:
                logger.debug("binding %r failed: %s", field, exc)
                raise

    def _decode_field(self, request: Request, field: BoundField, index: QueryIndex, parent: str) -> None:
        origin = field.spec.origin
        if origin is Origin.PATH:
            value = self.config.path_value(request, field.spec.name)
            field.set(coerce([value], field.annotation, source=f"path param '{field.spec.name}'"))
        elif origin is Origin.BODY:
            field.set(decode_body(request, field))
        elif origin is Origin.HEADER:
            raise HeaderNotImplementedError(field.spec.name)
        elif field.spec.deep:
            self._decode_deep(request, field, index, parent)
        else:
            decode_query(field, index, parent)

    def _decode_deep(self, request: Request, field: BoundField, index: QueryIndex, parent: str) -> None:
        label = query_label(field.spec.name, parent)
        values = index.deep(field.spec.name)
        if not values:
            if field.spec.required:
                raise RequiredParamError(label)
            return
        if not is_record(field.target):
            raise CoercionError(f"query param '{label}'", "expected record for deepObject style")
        self._decode_fields(request, field.child(), values, label)


def query_label(name: str, parent: str = "") -> str:
    """Name a query parameter the way it appears in the query string."""

    return f"{parent}[{name}]" if parent else name


def decode_query(field: BoundField, index: Mapping[str, Sequence[str]], parent: str = "") -> None:
    spec = field.spec
    label = query_label(spec.name, parent)
    values = resolve(spec, index)
    if values is None:
        if spec.required:
            raise RequiredParamError(label)
        return
    field.set(coerce(values, field.annotation, source=f"query param '{label}'"))


def negotiate_body_format(request: Request) -> BodyFormat:
    """Pick json or xml from ``content-type``, then ``accept``; json when neither is set."""

    media_type = request.media_type
    if not media_type:
        accept = (request.header("accept") or "").split(",", 1)[0]
        media_type = accept.split(";", 1)[0].strip().lower()
    if not media_type or media_type == "*/*":
        return BodyFormat.JSON
    if media_type.endswith("json"):
        return BodyFormat.JSON
    if media_type.endswith("xml"):
        return BodyFormat.XML
    raise UnsupportedBodyFormatError(media_type)


def decode_body(request: Request, field: BoundField) -> Any:
    body_format = field.spec.body_format
    if body_format is BodyFormat.AUTO:
        body_format = negotiate_body_format(request)
    annotation, _ = strip_annotated(field.annotation)
    data = request.read_body()
    if not data:
        raise BodyDecodeError(body_format.value, "empty body")
    try:
        if body_format is BodyFormat.JSON:
            return msgspec.json.decode(data, type=annotation, strict=False)
        if body_format is BodyFormat.XML:
            return convert(xml_decode(data), annotation)
    except (msgspec.DecodeError, LET.XMLSyntaxError) as exc:
        raise BodyDecodeError(body_format.value, str(exc)) from exc
    raise UnsupportedBodyFormatError(body_format.value)


@lru_cache(maxsize=1)
def default_decoder() -> Decoder:
    return Decoder()


def decode(request: Request, target: Any) -> Any:
    """Decode ``request`` into ``target`` with the default OpenAPI conventions."""

    return default_decoder().decode(request, target)


__all__ = [
    "Decoder",
    "DecoderConfig",
    "PathValue",
    "decode",
    "decode_body",
    "decode_query",
    "default_decoder",
    "negotiate_body_format",
    "query_label",
    "request_path_value",
]
