from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Optional

import msgspec
import pytest

from oasbind.exceptions import TagSyntaxError, UsageError
from oasbind.fields import Owner, field_spec, walk
from oasbind.tags import Origin, Style, oas


class Sort(msgspec.Struct):
    name: str = ""

    @classmethod
    def decode_text(cls, text: str) -> "Sort":
        return cls(name=text)


class Range(msgspec.Struct):
    start: Annotated[int, oas("rangeStart")] = 0
    end: Annotated[int, oas("rangeEnd")] = 0


class Paging(msgspec.Struct):
    page: int = 1
    window: Range = msgspec.field(default_factory=Range)


class Filter(msgspec.Struct):
    find: str = ""


class Payload(msgspec.Struct):
    id: int = 0


class Listing(msgspec.Struct):
    sort: Sort = msgspec.field(default_factory=Sort)
    paging: Paging = msgspec.field(default_factory=Paging)
    filter: Annotated[Filter, oas(",deepObject")] = msgspec.field(default_factory=Filter)
    body: Annotated[Payload, oas(",body,json")] = msgspec.field(default_factory=Payload)
    ignored: Annotated[str, oas("-")] = ""
    ignored_record: Annotated[Range, oas("-")] = msgspec.field(default_factory=Range)
    search: str = ""


class Holder(msgspec.Struct):
    range: Optional[Range] = None


class NeedsArgs(msgspec.Struct):
    value: int


class HolderOfRequired(msgspec.Struct):
    inner: Optional[NeedsArgs] = None


@dataclass
class DataRecord:
    user_id: Annotated[int, oas("id,path")] = 0
    tags: list[str] = field(default_factory=list)
    _secret: str = ""


class BadTag(msgspec.Struct):
    value: Annotated[list[str], oas("value,expanded")] = []


def _names(record: object) -> list[tuple[str, str]]:
    return [(bound.attribute, bound.spec.name) for bound in walk(Owner(type(record), instance=record))]


def test_walk_flattens_plain_records_in_declaration_order() -> None:
    assert _names(Listing()) == [
        ("sort", "sort"),
        ("page", "page"),
        ("start", "rangeStart"),
        ("end", "rangeEnd"),
        ("filter", "filter"),
        ("body", "body"),
        ("search", "search"),
    ]


def test_walk_supports_dataclasses() -> None:
    fields = list(walk(Owner(DataRecord, instance=DataRecord())))
    assert [(bound.attribute, bound.spec.name, bound.spec.origin) for bound in fields] == [
        ("user_id", "id", Origin.PATH),
        ("tags", "tags", Origin.QUERY),
    ]


def test_nested_field_writes_into_nested_instance() -> None:
    listing = Listing()
    start = next(bound for bound in walk(Owner(Listing, instance=listing)) if bound.attribute == "start")
    start.set(7)
    assert listing.paging.window.start == 7
    assert start.get() == 7


def test_optional_record_is_allocated_on_first_write() -> None:
    holder = Holder()
    fields = list(walk(Owner(Holder, instance=holder)))
    assert [bound.attribute for bound in fields] == ["start", "end"]
    assert fields[0].get() is None
    assert holder.range is None
    fields[1].set(9)
    assert holder.range == Range(start=0, end=9)


def test_allocation_failure_is_a_usage_error() -> None:
    holder = HolderOfRequired()
    (bound,) = walk(Owner(HolderOfRequired, instance=holder))
    with pytest.raises(UsageError):
        bound.set(1)


def test_walk_applies_decoder_defaults() -> None:
    owner = Owner(DataRecord, instance=DataRecord())
    (bound,) = [b for b in walk(owner, style=Style.PIPE_DELIMITED, exploded=False) if b.attribute == "tags"]
    assert bound.spec.style is Style.PIPE_DELIMITED
    assert bound.spec.exploded is False


def test_walk_surfaces_tag_errors() -> None:
    with pytest.raises(TagSyntaxError):
        list(walk(Owner(BadTag, instance=BadTag())))


def test_field_spec_lowercases_attribute() -> None:
    spec = field_spec("FieldOne", str, style=Style.FORM, exploded=True)
    assert spec.name == "fieldone"


class TreeNode(msgspec.Struct):
    label: str = ""
    parent: Optional[TreeNode] = None


def test_walk_stops_at_self_referencing_record() -> None:
    fields = list(walk(Owner(TreeNode, instance=TreeNode())))
    assert [(bound.attribute, bound.target) for bound in fields] == [("label", str), ("parent", TreeNode)]
