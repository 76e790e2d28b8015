"""Declarative binding of HTTP request parameters onto typed records."""

from .decoder import Decoder, DecoderConfig, decode
from .exceptions import (
    BodyConsumedError,
    BodyDecodeError,
    CoercionError,
    HeaderNotImplementedError,
    HTTPError,
    OasBindError,
    RequiredParamError,
    TagSyntaxError,
    UnsupportedBodyFormatError,
    UsageError,
)
from .query import QueryIndex
from .requests import Request
from .tags import BodyFormat, FieldSpec, Origin, Style, Tag, oas, parse_tag
from .typing_utils import (
    Complex64,
    Complex128,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    TextDecodable,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)

__all__ = [
    "BodyConsumedError",
    "BodyDecodeError",
    "BodyFormat",
    "CoercionError",
    "Complex128",
    "Complex64",
    "Decoder",
    "DecoderConfig",
    "FieldSpec",
    "Float32",
    "Float64",
    "HTTPError",
    "HeaderNotImplementedError",
    "Int16",
    "Int32",
    "Int64",
    "Int8",
    "OasBindError",
    "Origin",
    "QueryIndex",
    "RequiredParamError",
    "Request",
    "Style",
    "Tag",
    "TagSyntaxError",
    "TextDecodable",
    "UInt16",
    "UInt32",
    "UInt64",
    "UInt8",
    "UnsupportedBodyFormatError",
    "UsageError",
    "decode",
    "oas",
    "parse_tag",
]
