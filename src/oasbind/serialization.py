from __future__ import annotations

from typing import Any, Protocol, cast

import lxml.etree as LET
import msgspec


class _JSONModule(Protocol):
    def encode(self, obj: Any) -> bytes: ...

    def decode(self, data: bytes) -> Any: ...


_json = cast(_JSONModule, getattr(msgspec, "json"))

_XML_PARSER = LET.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)
TEXT_KEY = "#text"


def json_encode(value: Any) -> bytes:
    """Serialize ``value`` to JSON bytes using msgspec."""

    return _json.encode(value)


def json_decode(data: bytes) -> Any:
    """Deserialize JSON ``data`` into native Python values."""

    return _json.decode(data)


def xml_decode(data: bytes) -> Any:
    """Deserialize an XML document into nested dictionaries.

    The root element maps to its contents: attributes and child elements become
    keys, repeated children collapse into a list and leaf elements map to their
    text. Text of an element that also has attributes or children is kept under
    ``"#text"``. Namespaces are dropped from tag names.
    """

    root = LET.fromstring(data, parser=_XML_PARSER)
    return _element_value(root)


def _local_name(tag: str) -> str:
    if tag.startswith("{"):
        return tag.rsplit("}", 1)[1]
    return tag


def _element_value(element: Any) -> Any:
    children = [child for child in element if isinstance(child.tag, str)]
    if not children and not element.attrib:
        return element.text or ""
    payload: dict[str, Any] = {_local_name(key): value for key, value in element.attrib.items()}
    text = (element.text or "").strip()
    if text:
        payload[TEXT_KEY] = text
    for child in children:
        key = _local_name(child.tag)
        value = _element_value(child)
        if key in payload and isinstance(payload[key], list):
            payload[key].append(value)
        elif key in payload:
            payload[key] = [payload[key], value]
        else:
            payload[key] = value
    return payload


def convert(value: Any, annotation: Any) -> Any:
    """Convert builtin ``value`` into ``annotation`` allowing str-to-number coercion."""

    return msgspec.convert(value, type=annotation, strict=False)
