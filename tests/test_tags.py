from __future__ import annotations

import pytest

from oasbind.exceptions import TagSyntaxError
from oasbind.tags import BodyFormat, FieldSpec, Origin, Style, Tag, oas, parse_tag


def test_empty_tag_uses_defaults() -> None:
    spec = parse_tag("")
    assert spec == FieldSpec(name="", origin=Origin.QUERY, style=Style.FORM, exploded=True)
    assert not spec.required
    assert not spec.ignored


def test_name_and_settings_are_trimmed() -> None:
    spec = parse_tag(" filterType , query , required ")
    assert spec.name == "filterType"
    assert spec.origin is Origin.QUERY
    assert spec.required


@pytest.mark.parametrize(
    ("token", "style", "delimiter"),
    [
        ("form", Style.FORM, ","),
        ("spaceDelimited", Style.SPACE_DELIMITED, " "),
        ("pipeDelimited", Style.PIPE_DELIMITED, "|"),
    ],
)
def test_style_implies_imploded(token: str, style: Style, delimiter: str) -> None:
    spec = parse_tag(f"ids,{token}")
    assert spec.style is style
    assert spec.exploded is False
    assert spec.style.delimiter == delimiter


def test_later_explode_overrides_style() -> None:
    assert parse_tag("ids,pipeDelimited,explode").exploded is True
    assert parse_tag("ids,explode,pipeDelimited").exploded is False


def test_deep_object_implies_exploded() -> None:
    spec = parse_tag("filter,deepObject", exploded=False)
    assert spec.style is Style.DEEP_OBJECT
    assert spec.exploded is True
    assert spec.deep


def test_explode_and_implode_aliases() -> None:
    assert parse_tag("a,implode").exploded is False
    assert parse_tag("a,imploded").exploded is False
    assert parse_tag("a,exploded", exploded=False).exploded is True
    assert parse_tag("a,explode", exploded=False).exploded is True


def test_defaults_come_from_arguments() -> None:
    spec = parse_tag("ids", style=Style.PIPE_DELIMITED, exploded=False)
    assert spec.style is Style.PIPE_DELIMITED
    assert spec.exploded is False


@pytest.mark.parametrize("origin", list(Origin))
def test_origin_tokens(origin: Origin) -> None:
    assert parse_tag(f"id,{origin.value}").origin is origin


def test_body_format_tokens() -> None:
    assert parse_tag(",body,json").body_format is BodyFormat.JSON
    assert parse_tag(",body,xml").body_format is BodyFormat.XML
    assert parse_tag(",body").body_format is BodyFormat.AUTO


def test_unknown_setting_is_rejected() -> None:
    with pytest.raises(TagSyntaxError) as captured:
        parse_tag("value,expanded")
    assert captured.value.token == "expanded"
    assert captured.value.tag == "value,expanded"
    assert isinstance(captured.value, ValueError)


def test_empty_settings_are_skipped() -> None:
    assert parse_tag("value,,required,").required


def test_dash_marks_field_ignored() -> None:
    assert parse_tag("-").ignored


def test_oas_builds_tag_marker() -> None:
    assert oas("id,path") == Tag("id,path")
    assert oas() == Tag("")
