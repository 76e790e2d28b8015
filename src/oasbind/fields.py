"""Enumeration of the bindable fields of a record."""

from __future__ import annotations

import dataclasses
from functools import lru_cache
from typing import Any, Iterator, Mapping, get_type_hints

import msgspec

from .exceptions import UsageError
from .tags import FieldSpec, Origin, Style, Tag, parse_tag
from .typing_utils import is_record, is_text_decodable, strip_annotated, unwrap_optional


@lru_cache(maxsize=None)
def _record_hints(model: type[Any]) -> Mapping[str, Any]:
    return get_type_hints(model, include_extras=True)


@lru_cache(maxsize=None)
def _record_fields(model: type[Any]) -> tuple[str, ...]:
    if issubclass(model, msgspec.Struct):
        return model.__struct_fields__
    return tuple(field.name for field in dataclasses.fields(model))


class Owner:
    """Record instance that holds a group of fields, allocated on first write."""

    __slots__ = ("_instance", "_parent", "attribute", "model")

    def __init__(
        self,
        model: type[Any],
        *,
        instance: Any = None,
        parent: "Owner | None" = None,
        attribute: str = "",
    ) -> None:
        self.model = model
        self._instance = instance
        self._parent = parent
        self.attribute = attribute

    def peek(self) -> Any:
        """Return the instance if it exists without allocating it."""

        if self._instance is None and self._parent is not None:
            parent = self._parent.peek()
            if parent is not None:
                self._instance = getattr(parent, self.attribute, None)
        return self._instance

    def resolve(self) -> Any:
        instance = self.peek()
        if instance is None:
            try:
                instance = self.model()
            except TypeError as exc:
                raise UsageError(f"cannot allocate {self.model.__name__}: {exc}") from exc
            if self._parent is not None:
                setattr(self._parent.resolve(), self.attribute, instance)
            self._instance = instance
        return instance


class BoundField:
    """A record attribute paired with its parsed tag."""

    __slots__ = ("annotation", "attribute", "owner", "spec")

    def __init__(self, owner: Owner, attribute: str, annotation: Any, spec: FieldSpec) -> None:
        self.owner = owner
        self.attribute = attribute
        self.annotation = annotation
        self.spec = spec

    def __repr__(self) -> str:
        return f"BoundField({self.owner.model.__name__}.{self.attribute}, {self.spec.name!r})"

    @property
    def target(self) -> Any:
        """Field type without ``Annotated``/``Optional`` wrappers."""

        return unwrap_optional(self.annotation)

    def get(self) -> Any:
        instance = self.owner.peek()
        if instance is None:
            return None
        return getattr(instance, self.attribute, None)

    def set(self, value: Any) -> None:
        setattr(self.owner.resolve(), self.attribute, value)

    def child(self) -> Owner:
        """Return the owner for the record held by this field."""

        return Owner(self.target, parent=self.owner, attribute=self.attribute)


def field_spec(attribute: str, annotation: Any, *, style: Style, exploded: bool) -> FieldSpec:
    """Parse the tag of ``annotation``, naming the field after ``attribute`` when unnamed."""

    _, extras = strip_annotated(annotation)
    tag = next((extra for extra in extras if isinstance(extra, Tag)), Tag())
    spec = parse_tag(tag.value, style=style, exploded=exploded)
    if not spec.name:
        spec = msgspec.structs.replace(spec, name=attribute.lower())
    return spec


def is_terminal(field: BoundField) -> bool:
    spec = field.spec
    if spec.origin is Origin.BODY or spec.deep:
        return True
    target = field.target
    return is_text_decodable(target) or not is_record(target)


def walk(
    owner: Owner,
    *,
    style: Style = Style.FORM,
    exploded: bool = True,
    _enclosing: frozenset[type[Any]] = frozenset(),
) -> Iterator[BoundField]:
    """Yield the bindable fields of ``owner`` in declaration order.

    Nested records are flattened depth-first unless they decode from text, come
    from the body or use the deep object style. A record nested inside itself is
    not flattened again and binds as a single field.
    """

    enclosing = _enclosing | {owner.model}
    hints = _record_hints(owner.model)
    for attribute in _record_fields(owner.model):
        if attribute.startswith("_"):
            continue
        annotation = hints.get(attribute, Any)
        spec = field_spec(attribute, annotation, style=style, exploded=exploded)
        if spec.ignored:
            continue
        field = BoundField(owner, attribute, annotation, spec)
        if is_terminal(field) or field.target in enclosing:
            yield field
        else:
            yield from walk(field.child(), style=style, exploded=exploded, _enclosing=enclosing)


__all__ = ["BoundField", "Owner", "field_spec", "is_terminal", "walk"]
