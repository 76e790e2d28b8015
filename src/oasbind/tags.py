"""Field tag grammar.

A tag is attached to a record field through :data:`typing.Annotated`::

    class Search(msgspec.Struct):
        ids: Annotated[list[int], oas("id,query,pipeDelimited")] = []

The grammar is ``<name>[,<setting>]*`` where settings are unordered and parsed
left to right. Unknown settings raise :class:`~oasbind.exceptions.TagSyntaxError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

import msgspec

from .exceptions import TagSyntaxError

IGNORE = "-"


class Origin(str, Enum):
    PATH = "path"
    QUERY = "query"
    BODY = "body"
    HEADER = "header"


class Style(str, Enum):
    FORM = "form"  # ?id=3,4,5
    SPACE_DELIMITED = "spaceDelimited"  # ?id=3%204%205
    PIPE_DELIMITED = "pipeDelimited"  # ?id=3|4|5
    DEEP_OBJECT = "deepObject"  # ?id[role]=admin&id[firstName]=Alex

    @property
    def delimiter(self) -> str:
        if self is Style.SPACE_DELIMITED:
            return " "
        if self is Style.PIPE_DELIMITED:
            return "|"
        return ","


class BodyFormat(str, Enum):
    AUTO = ""
    JSON = "json"
    XML = "xml"


@dataclass(frozen=True, slots=True)
class Tag:
    """Binding metadata for a single record field."""

    value: str = ""


def oas(value: str = "") -> Tag:
    """Return the :class:`Tag` marker for use inside :data:`typing.Annotated`."""

    return Tag(value)


class FieldSpec(msgspec.Struct, frozen=True):
    """Parsed form of a field tag."""

    name: str = ""
    origin: Origin = Origin.QUERY
    style: Style = Style.FORM
    exploded: bool = True
    required: bool = False
    body_format: BodyFormat = BodyFormat.AUTO

    @property
    def ignored(self) -> bool:
        return self.name == IGNORE

    @property
    def deep(self) -> bool:
        return self.origin is Origin.QUERY and self.style is Style.DEEP_OBJECT


_ORIGINS = {origin.value: origin for origin in Origin}
_STYLES = {style.value: style for style in Style}
_FORMATS = {fmt.value: fmt for fmt in BodyFormat if fmt.value}
_EXPLODE = frozenset({"explode", "exploded"})
_IMPLODE = frozenset({"implode", "imploded"})


@lru_cache(maxsize=1024)
def parse_tag(tag: str, *, style: Style = Style.FORM, exploded: bool = True) -> FieldSpec:
    """Parse ``tag`` into a :class:`FieldSpec` using ``style``/``exploded`` as defaults."""

    name, _, rest = tag.partition(",")
    origin = Origin.QUERY
    required = False
    body_format = BodyFormat.AUTO
    for raw in rest.split(",") if rest else ():
        token = raw.strip()
        if not token:
            continue
        if token == "required":
            required = True
        elif token in _EXPLODE:
            exploded = True
        elif token in _IMPLODE:
            exploded = False
        elif token in _STYLES:
            style = _STYLES[token]
            exploded = style is Style.DEEP_OBJECT
        elif token in _ORIGINS:
            origin = _ORIGINS[token]
        elif token in _FORMATS:
            body_format = _FORMATS[token]
        else:
            raise TagSyntaxError(tag, token)
    return FieldSpec(
        name=name.strip(),
        origin=origin,
        style=style,
        exploded=exploded,
        required=required,
        body_format=body_format,
    )


__all__ = ["BodyFormat", "FieldSpec", "IGNORE", "Origin", "Style", "Tag", "oas", "parse_tag"]
