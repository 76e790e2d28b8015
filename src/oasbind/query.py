"""Query string lookup following the OpenAPI serialization styles."""

from __future__ import annotations

from typing import Iterator, Mapping, Sequence
from urllib.parse import parse_qsl

from .tags import FieldSpec


class QueryIndex(Mapping[str, list[str]]):
    """Query values indexed by their original and lower-cased key.

    Case variants of one key share a single value list, so ``?Id=1&id=2``
    exposes ``["1", "2"]`` under ``Id`` and ``id`` alike.
    """

    __slots__ = ("_grouped", "_index")

    def __init__(self, grouped: Mapping[str, Sequence[str]] | None = None) -> None:
        self._grouped = {key: list(values) for key, values in (grouped or {}).items()}
        self._index: dict[str, list[str]] = {}
        for key, values in self._grouped.items():
            lower = key.lower()
            merged = self._index.get(lower)
            if merged is None:
                merged = []
                self._index[lower] = merged
            merged.extend(values)
            self._index[key] = merged

    @classmethod
    def parse(cls, query_string: str) -> "QueryIndex":
        grouped: dict[str, list[str]] = {}
        for key, value in parse_qsl(query_string, keep_blank_values=True):
            grouped.setdefault(key, []).append(value)
        return cls(grouped)

    def __getitem__(self, key: str) -> list[str]:
        return self._index[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def deep(self, name: str) -> "QueryIndex":
        """Collect ``name[subkey]`` parameters into an index keyed by ``subkey``.

        Deeper nesting stays in the remaining key, so ``filter[range][start]``
        lands under ``range[start]`` in the index for ``filter``.
        """

        prefix = f"{name.lower()}["
        grouped: dict[str, list[str]] = {}
        for key, values in self._grouped.items():
            if not key.lower().startswith(prefix):
                continue
            subkey, closed, rest = key[len(prefix) :].partition("]")
            if not closed:
                continue
            grouped.setdefault(subkey + rest, []).extend(values)
        return QueryIndex(grouped)


def resolve(spec: FieldSpec, index: Mapping[str, Sequence[str]]) -> list[str] | None:
    """Return the raw values for ``spec`` or ``None`` when the key is absent."""

    values = index.get(spec.name)
    if values is None:
        return None
    if spec.exploded or not values:
        return list(values)
    # imploded but sent exploded: the last occurrence wins
    return values[-1].split(spec.style.delimiter)


__all__ = ["QueryIndex", "resolve"]
