"""Text codec for namespace records.

A namespace is persisted as three parallel sequences (keys, values, types),
each flattened into one string. Elements are escaped so that the separator
can appear inside them, then joined with a single separator character:

    ["a,b", "c\\"]  ->  'a\\,b,c\\\\'

The empty string is written as the reserved escape ``\\0`` so that a
sequence holding one empty element is distinguishable from an empty one.
Values are stored as canonical, locale-independent text together with a
one-character type marker.
"""
from __future__ import annotations
import re
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List

from prefstore_lib.errors import MalformedValueError, UnsupportedTypeError

SEPARATOR = ","
ESCAPE = "\\"
EMPTY_FIELD = ESCAPE + "0"

INT32_MIN, INT32_MAX = -(2 ** 31), 2 ** 31 - 1
INT64_MIN, INT64_MAX = -(2 ** 63), 2 ** 63 - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)


class TypeTag(Enum):
    """Closed set of storable types, valued by their persisted marker."""

    BOOLEAN = "b"
    INT32 = "i"
    INT64 = "l"
    FLOAT32 = "f"
    FLOAT64 = "d"
    STRING = "s"

    @property
    def marker(self) -> str:
        return self.value

    @classmethod
    def from_marker(cls, marker: str) -> "TypeTag":
        try:
            return cls(marker)
        except ValueError:
            raise MalformedValueError(f"Unknown type marker {marker!r}") from None


# Field escaping ------------------------------------------------------------

def encode_field(text: str) -> str:
    """Escape backslashes and separators so `text` can be joined safely."""
    # Non-empty fields keep the legacy byte layout; legacy records never held
    # an empty field (readers dropped them), so "\0" cannot clash with them.
    if text == "":
        return EMPTY_FIELD
    return text.replace(ESCAPE, ESCAPE + ESCAPE).replace(SEPARATOR, ESCAPE + SEPARATOR)


def decode_field(text: str) -> str:
    """Inverse of `encode_field`.

    The separator escape is undone before the backslash escape; reversing
    the order would turn an escaped backslash followed by a separator escape
    into the wrong characters.
    """
    if text == EMPTY_FIELD:
        return ""
    return text.replace(ESCAPE + SEPARATOR, SEPARATOR).replace(ESCAPE + ESCAPE, ESCAPE)


def join_sequence(seq: Iterable[str]) -> str:
    return SEPARATOR.join(encode_field(item) for item in seq)


def _split_raw(text: str) -> List[str]:
    # Split on separators that are not consumed by a preceding escape.
    parts: List[str] = []
    start = 0
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == ESCAPE:
            i += 2
            continue
        if ch == SEPARATOR:
            parts.append(text[start:i])
            start = i + 1
        i += 1
    parts.append(text[start:])
    return parts


def split_sequence(text: str) -> List[str]:
    """Split a joined sequence and decode each element.

    Splitting happens on the encoded text; decoding first would expose the
    escaped separators and break elements apart.
    """
    if text == "":
        return []
    return [decode_field(part) for part in _split_raw(text)]


# Typed values --------------------------------------------------------------

def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        raise UnsupportedTypeError(value, "out of range for float32") from None


def type_tag_of(value: Any) -> TypeTag:
    """Pick the tag for a native value.

    Python has one int and one float type, so ints get the narrowest integer
    tag that holds them and floats are always stored as double precision.
    """
    if isinstance(value, bool):
        return TypeTag.BOOLEAN
    if isinstance(value, int):
        if INT32_MIN <= value <= INT32_MAX:
            return TypeTag.INT32
        if INT64_MIN <= value <= INT64_MAX:
            return TypeTag.INT64
        raise UnsupportedTypeError(value, "integer out of range for int64")
    if isinstance(value, float):
        return TypeTag.FLOAT64
    if isinstance(value, str):
        return TypeTag.STRING
    raise UnsupportedTypeError(value)


def to_text(value: Any, tag: TypeTag) -> str:
    """Canonical text for `value` stored under `tag`."""
    if tag is TypeTag.BOOLEAN:
        return "True" if value else "False"
    if tag in (TypeTag.INT32, TypeTag.INT64):
        return str(int(value))
    if tag is TypeTag.FLOAT32:
        return repr(_to_float32(float(value)))
    if tag is TypeTag.FLOAT64:
        return repr(float(value))
    return str(value)


def parse_typed(text: str, tag: TypeTag) -> Any:
    """Parse persisted text back into a native value for `tag`."""
    raw = text.strip()
    if tag is TypeTag.STRING:
        return text
    if tag is TypeTag.BOOLEAN:
        lowered = raw.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        raise MalformedValueError(f"Cannot parse {text!r} as boolean")
    if tag in (TypeTag.INT32, TypeTag.INT64):
        if not _INT_RE.fullmatch(raw):
            raise MalformedValueError(f"Cannot parse {text!r} as {tag.name.lower()}")
        number = int(raw)
        low, high = (INT32_MIN, INT32_MAX) if tag is TypeTag.INT32 else (INT64_MIN, INT64_MAX)
        if not low <= number <= high:
            raise MalformedValueError(f"{text!r} is out of range for {tag.name.lower()}")
        return number
    if not _FLOAT_RE.fullmatch(raw):
        raise MalformedValueError(f"Cannot parse {text!r} as {tag.name.lower()}")
    number = float(raw)
    if tag is TypeTag.FLOAT32:
        try:
            return _to_float32(number)
        except UnsupportedTypeError:
            raise MalformedValueError(f"{text!r} is out of range for float32") from None
    return number


@dataclass(frozen=True)
class TypedValue:
    """A native value paired with the tag it is stored under.

    Use the named constructors when the storage type is known; `of()` falls
    back to inspecting the runtime type.
    """

    tag: TypeTag
    value: Any

    @classmethod
    def of(cls, value: Any) -> "TypedValue":
        tag = type_tag_of(value)
        return cls(tag, value)

    @classmethod
    def boolean(cls, value: bool) -> "TypedValue":
        if not isinstance(value, bool):
            raise UnsupportedTypeError(value, "expected bool")
        return cls(TypeTag.BOOLEAN, value)

    @classmethod
    def int32(cls, value: int) -> "TypedValue":
        if not _is_int(value):
            raise UnsupportedTypeError(value, "expected int")
        if not INT32_MIN <= value <= INT32_MAX:
            raise UnsupportedTypeError(value, "out of range for int32")
        return cls(TypeTag.INT32, value)

    @classmethod
    def int64(cls, value: int) -> "TypedValue":
        if not _is_int(value):
            raise UnsupportedTypeError(value, "expected int")
        if not INT64_MIN <= value <= INT64_MAX:
            raise UnsupportedTypeError(value, "out of range for int64")
        return cls(TypeTag.INT64, value)

    @classmethod
    def float32(cls, value: float) -> "TypedValue":
        if not _is_number(value):
            raise UnsupportedTypeError(value, "expected float")
        return cls(TypeTag.FLOAT32, _to_float32(float(value)))

    @classmethod
    def float64(cls, value: float) -> "TypedValue":
        if not _is_number(value):
            raise UnsupportedTypeError(value, "expected float")
        return cls(TypeTag.FLOAT64, float(value))

    @classmethod
    def string(cls, value: str) -> "TypedValue":
        if not isinstance(value, str):
            raise UnsupportedTypeError(value, "expected str")
        return cls(TypeTag.STRING, value)

    @classmethod
    def parse(cls, text: str, tag: TypeTag) -> "TypedValue":
        return cls(tag, parse_typed(text, tag))

    def to_text(self) -> str:
        return to_text(self.value, self.tag)
