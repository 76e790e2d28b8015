"""Conversion of raw query strings into annotated Python values."""

from __future__ import annotations

import math
import re
import struct
import types
from dataclasses import dataclass, is_dataclass
from typing import (
    Annotated,
    Any,
    Protocol,
    Sequence,
    TypeVar,
    Union,
    get_args,
    get_origin,
    runtime_checkable,
)

import msgspec

from .exceptions import CoercionError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Precision:
    """Floating point precision marker, in bits per real component."""

    bits: int


Int8 = Annotated[int, msgspec.Meta(ge=-(2**7), le=2**7 - 1)]
Int16 = Annotated[int, msgspec.Meta(ge=-(2**15), le=2**15 - 1)]
Int32 = Annotated[int, msgspec.Meta(ge=-(2**31), le=2**31 - 1)]
Int64 = Annotated[int, msgspec.Meta(ge=-(2**63), le=2**63 - 1)]
UInt8 = Annotated[int, msgspec.Meta(ge=0, le=2**8 - 1)]
UInt16 = Annotated[int, msgspec.Meta(ge=0, le=2**16 - 1)]
UInt32 = Annotated[int, msgspec.Meta(ge=0, le=2**32 - 1)]
UInt64 = Annotated[int, msgspec.Meta(ge=0, le=2**64 - 1)]
Float32 = Annotated[float, Precision(32)]
Float64 = float
Complex64 = Annotated[complex, Precision(32)]
Complex128 = complex

_DEFAULT_INT_BOUNDS = (-(2**63), 2**63 - 1)
_SIGNED_INT = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_INT = re.compile(r"[0-9]+")
_TRUE = frozenset({"1", "t", "true", "yes", "on"})
_FALSE = frozenset({"0", "f", "false", "no", "off"})
_SEQUENCES: dict[Any, type] = {list: list, tuple: tuple, set: set, frozenset: frozenset}


@runtime_checkable
class TextDecodable(Protocol):
    """Types that build themselves from a single raw text value.

    ``decode_text`` should raise :class:`ValueError` for malformed input.
    """

    @classmethod
    def decode_text(cls: type[T], text: str) -> T: ...


def is_text_decodable(annotation: Any) -> bool:
    return isinstance(annotation, type) and callable(getattr(annotation, "decode_text", None))


def is_record(annotation: Any) -> bool:
    return isinstance(annotation, type) and (issubclass(annotation, msgspec.Struct) or is_dataclass(annotation))


def strip_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Return the bare type of ``annotation`` and its ``Annotated`` metadata."""

    if get_origin(annotation) is Annotated:
        base, *extras = get_args(annotation)
        return base, tuple(extras)
    return annotation, ()


def unwrap_optional(annotation: Any) -> Any:
    """Strip ``Annotated`` and ``Optional`` wrappers from ``annotation``."""

    base, _ = strip_annotated(annotation)
    if _is_union(base):
        options = [option for option in get_args(base) if option is not type(None)]
        if len(options) == 1:
            return unwrap_optional(options[0])
    return base


def _is_union(annotation: Any) -> bool:
    return get_origin(annotation) is Union or isinstance(annotation, types.UnionType)


def _describe(annotation: Any) -> str:
    return getattr(annotation, "__name__", None) or repr(annotation)


def coerce(values: Sequence[str], annotation: Any, *, source: str) -> Any:
    """Convert raw ``values`` into ``annotation`` raising :class:`CoercionError` on failure.

    Scalars consume the first value; sequences consume every value in order.
    """

    base, extras = strip_annotated(annotation)
    if _is_union(base):
        return _coerce_union(values, base, source=source)
    if is_text_decodable(base):
        if not values:
            raise CoercionError(source, "no value supplied")
        try:
            return base.decode_text(values[0])
        except (TypeError, ValueError) as exc:
            raise CoercionError(source, str(exc)) from exc
    origin = get_origin(base) or base
    if origin in _SEQUENCES:
        return _coerce_sequence(values, base, origin, source=source)
    if not values:
        raise CoercionError(source, "no value supplied")
    return _coerce_scalar(values[0], base, extras, source=source)


def _coerce_union(values: Sequence[str], annotation: Any, *, source: str) -> Any:
    options = [option for option in get_args(annotation) if option is not type(None)]
    if len(options) == 1:
        return coerce(values, options[0], source=source)
    for option in options:
        try:
            return coerce(values, option, source=source)
        except CoercionError:
            continue
    raise CoercionError(source, f"value {values[0] if values else ''!r} does not match {annotation!r}")


def _coerce_sequence(values: Sequence[str], annotation: Any, origin: Any, *, source: str) -> Any:
    args = get_args(annotation)
    if origin is tuple and args and (len(args) != 2 or args[1] is not Ellipsis):
        if len(args) != len(values):
            raise CoercionError(source, f"expected {len(args)} values, got {len(values)}")
        return tuple(coerce([value], item, source=source) for value, item in zip(values, args))
    item_type = args[0] if args else str
    items = [coerce([value], item_type, source=source) for value in values]
    return _SEQUENCES[origin](items)


def _coerce_scalar(value: str, annotation: Any, extras: tuple[Any, ...], *, source: str) -> Any:
    if annotation in {str, Any}:
        return value
    if annotation is bool:
        return _parse_bool(value, source=source)
    if annotation in {bytes, bytearray}:
        return annotation(value.encode())
    if annotation is int:
        return _parse_int(value, extras, source=source)
    if annotation is float:
        return _parse_float(value, _precision(extras), source=source)
    if annotation is complex:
        return _parse_complex(value, _precision(extras), source=source)
    if is_record(annotation) or get_origin(annotation) is dict or annotation is dict:
        raise CoercionError(source, f"unsupported type {_describe(annotation)}")
    # enums, datetimes, uuids, decimals and friends
    try:
        return msgspec.convert(value, type=annotation, strict=False)
    except msgspec.ValidationError as exc:
        raise CoercionError(source, str(exc)) from exc
    except TypeError as exc:
        raise CoercionError(source, f"unsupported type {_describe(annotation)}") from exc


def _precision(extras: tuple[Any, ...]) -> int:
    for extra in extras:
        if isinstance(extra, Precision):
            return extra.bits
    return 64


def _int_bounds(extras: tuple[Any, ...]) -> tuple[int, int]:
    low, high = _DEFAULT_INT_BOUNDS
    for extra in extras:
        if isinstance(extra, msgspec.Meta):
            if extra.ge is not None:
                low = int(extra.ge)
            if extra.le is not None:
                high = int(extra.le)
    return low, high


def _parse_bool(value: str, *, source: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise CoercionError(source, f"invalid bool value {value!r}")


def _parse_int(value: str, extras: tuple[Any, ...], *, source: str) -> int:
    low, high = _int_bounds(extras)
    pattern = _UNSIGNED_INT if low >= 0 else _SIGNED_INT
    if not pattern.fullmatch(value):
        raise CoercionError(source, f"invalid integer value {value!r}")
    digits = value.lstrip("+-").lstrip("0")
    if len(digits) > len(str(max(-low, high))):
        raise CoercionError(source, f"value {value!r} out of range [{low}, {high}]")
    parsed = int(digits or "0")
    if value.startswith("-"):
        parsed = -parsed
    if not low <= parsed <= high:
        raise CoercionError(source, f"value {value!r} out of range [{low}, {high}]")
    return parsed


def _check_float_text(value: str, *, source: str) -> None:
    if not value or value != value.strip() or "_" in value:
        raise CoercionError(source, f"invalid float value {value!r}")


def _is_inf_literal(value: str) -> bool:
    return value.lstrip("+-").lower() in {"inf", "infinity"}


def _round32(number: float, value: str, *, source: str) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", number))[0]
    except OverflowError as exc:
        raise CoercionError(source, f"value {value!r} out of range for float32") from exc


def _parse_float(value: str, bits: int, *, source: str) -> float:
    _check_float_text(value, source=source)
    try:
        number = float(value)
    except ValueError as exc:
        raise CoercionError(source, f"invalid float value {value!r}") from exc
    if math.isinf(number) and not _is_inf_literal(value):
        raise CoercionError(source, f"value {value!r} out of range for float{bits}")
    if bits == 32:
        return _round32(number, value, source=source)
    return number


def _parse_complex(value: str, bits: int, *, source: str) -> complex:
    _check_float_text(value, source=source)
    text = value
    if text.startswith("(") and text.endswith(")"):
        text = text[1:-1]
    if text.endswith("i"):
        text = text[:-1] + "j"
    try:
        number = complex(text)
    except ValueError as exc:
        raise CoercionError(source, f"invalid complex value {value!r}") from exc
    if (math.isinf(number.real) or math.isinf(number.imag)) and "inf" not in value.lower():
        raise CoercionError(source, f"value {value!r} out of range for complex{bits * 2}")
    if bits == 32:
        return complex(
            _round32(number.real, value, source=source),
            _round32(number.imag, value, source=source),
        )
    return number


__all__ = [
    "Complex128",
    "Complex64",
    "Float32",
    "Float64",
    "Int16",
    "Int32",
    "Int64",
    "Int8",
    "Precision",
    "TextDecodable",
    "UInt16",
    "UInt32",
    "UInt64",
    "UInt8",
    "coerce",
    "is_record",
    "is_text_decodable",
    "strip_annotated",
    "unwrap_optional",
]
