"""Core types: Attr, AttrKind and Ordering."""

from __future__ import annotations

import math
import re
import struct
from enum import Enum
from typing import TYPE_CHECKING, Union

from groupset.model.errors import TypeMismatchError

if TYPE_CHECKING:
    from groupset.model.schema import Schema

Scalar = Union[int, float, bool, str]

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(inf|infinity|nan|([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?)",
    re.IGNORECASE,
)
_TRUE_LITERALS = frozenset({"true", "t"})
_FALSE_LITERALS = frozenset({"false", "f"})


class AttrKind(Enum):
    """The four cases an attribute value can take."""

    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    TEXT = "text"

    @property
    def is_numeric(self) -> bool:
        return self is AttrKind.INT or self is AttrKind.FLOAT


class Ordering(Enum):
    """Result of comparing two attributes of the same kind."""

    LESS = "<"
    EQUAL = "="
    GREATER = ">"


def to_float32(value: float) -> float:
    """Round a Python float to the nearest 32-bit IEEE value."""
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def trunc_to_int32(value: float) -> int:
    """Truncate toward zero and saturate into the 32-bit signed range.

    NaN maps to 0.
    """
    if math.isnan(value):
        return 0
    if value >= INT32_MAX:
        return INT32_MAX
    if value <= INT32_MIN:
        return INT32_MIN
    return math.trunc(value)


class Attr:
    """An immutable, dynamically typed scalar value.

    Equality holds only between attributes of the same kind, so
    ``Attr.of_int(1) != Attr.of_float(1.0)``. Ordering comparisons across
    kinds raise TypeError; use ``compare`` for a partial order that returns
    None instead.
    """

    __slots__ = ("_kind", "_value")

    def __init__(self, kind: AttrKind, value: Scalar) -> None:
        object.__setattr__(self, "_kind", kind)
        object.__setattr__(self, "_value", _normalize(kind, value))

    @classmethod
    def of_int(cls, value: int = 0) -> Attr:
        return cls(AttrKind.INT, value)

    @classmethod
    def of_float(cls, value: float = 0.0) -> Attr:
        return cls(AttrKind.FLOAT, value)

    @classmethod
    def of_bool(cls, value: bool = False) -> Attr:
        return cls(AttrKind.BOOL, value)

    @classmethod
    def of_text(cls, value: str = "") -> Attr:
        return cls(AttrKind.TEXT, value)

    @classmethod
    def sample(cls, kind: AttrKind) -> Attr:
        """Return the zero value of *kind*, used to declare a column type."""
        if kind is AttrKind.INT:
            return cls.of_int()
        if kind is AttrKind.FLOAT:
            return cls.of_float()
        if kind is AttrKind.BOOL:
            return cls.of_bool()
        if kind is AttrKind.TEXT:
            return cls.of_text()
        raise AssertionError(f"unhandled attribute kind: {kind!r}")

    @classmethod
    def parse(cls, schema: Schema, column: str, raw: str) -> Attr:
        """Parse *raw* as the type declared for *column* in *schema*.

        Raises UnknownColumnError if the column is not declared and
        TypeMismatchError if the text does not parse as the declared type.
        """
        return cls.parse_as(schema.declared_type(column).kind, raw, column)

    @classmethod
    def parse_as(cls, kind: AttrKind, raw: str, column: str = "<value>") -> Attr:
        """Parse *raw* as *kind*; *column* only labels the error."""
        if kind is AttrKind.INT:
            if not _INT_RE.fullmatch(raw):
                raise TypeMismatchError(column, raw, "int")
            try:
                value = int(raw)
            except ValueError:  # beyond the interpreter's digit limit
                raise TypeMismatchError(column, raw, "int")
            if not INT32_MIN <= value <= INT32_MAX:
                raise TypeMismatchError(column, raw, "int")
            return cls(AttrKind.INT, value)
        if kind is AttrKind.FLOAT:
            if not _FLOAT_RE.fullmatch(raw):
                raise TypeMismatchError(column, raw, "float")
            return cls(AttrKind.FLOAT, float(raw))
        if kind is AttrKind.BOOL:
            lowered = raw.lower()
            if lowered in _TRUE_LITERALS:
                return cls(AttrKind.BOOL, True)
            if lowered in _FALSE_LITERALS:
                return cls(AttrKind.BOOL, False)
            raise TypeMismatchError(column, raw, "bool")
        if kind is AttrKind.TEXT:
            return cls(AttrKind.TEXT, raw)
        raise AssertionError(f"unhandled attribute kind: {kind!r}")

    @property
    def kind(self) -> AttrKind:
        return self._kind

    @property
    def value(self) -> Scalar:
        return self._value

    @property
    def is_numeric(self) -> bool:
        return self._kind.is_numeric

    def compare(self, other: Attr) -> Ordering | None:
        """Compare with *other*; None when kinds differ or values are unordered."""
        if self._kind is not other._kind:
            return None
        if self._value < other._value:
            return Ordering.LESS
        if self._value == other._value:
            return Ordering.EQUAL
        if self._value > other._value:
            return Ordering.GREATER
        return None  # NaN

    def _check_kind(self, other: Attr) -> None:
        if self._kind is not other._kind:
            raise TypeError(
                f"Cannot order {self._kind.value} against {other._kind.value}"
            )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Attr):
            return NotImplemented
        return self._kind is other._kind and self._value == other._value

    def __hash__(self) -> int:
        return hash((self._kind, self._value))

    def __lt__(self, other: Attr) -> bool:
        if not isinstance(other, Attr):
            return NotImplemented
        self._check_kind(other)
        return self._value < other._value

    def __le__(self, other: Attr) -> bool:
        if not isinstance(other, Attr):
            return NotImplemented
        self._check_kind(other)
        return self._value <= other._value

    def __gt__(self, other: Attr) -> bool:
        if not isinstance(other, Attr):
            return NotImplemented
        self._check_kind(other)
        return self._value > other._value

    def __ge__(self, other: Attr) -> bool:
        if not isinstance(other, Attr):
            return NotImplemented
        self._check_kind(other)
        return self._value >= other._value

    def __repr__(self) -> str:
        return f"{self._kind.name.capitalize()}({self._value!r})"

    def __str__(self) -> str:
        if self._kind is AttrKind.BOOL:
            return "true" if self._value else "false"
        return str(self._value)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Attr is immutable")


def _normalize(kind: AttrKind, value: Scalar) -> Scalar:
    """Check *value* against *kind* and narrow it to the kind's width."""
    if kind is AttrKind.INT:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Int attribute requires an int, got {value!r}")
        if not INT32_MIN <= value <= INT32_MAX:
            raise ValueError(f"Int attribute out of 32-bit range: {value}")
        return value
    if kind is AttrKind.FLOAT:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"Float attribute requires a number, got {value!r}")
        return to_float32(float(value))
    if kind is AttrKind.BOOL:
        if not isinstance(value, bool):
            raise TypeError(f"Bool attribute requires a bool, got {value!r}")
        return value
    if kind is AttrKind.TEXT:
        if not isinstance(value, str):
            raise TypeError(f"Text attribute requires a str, got {value!r}")
        return value
    raise AssertionError(f"unhandled attribute kind: {kind!r}")
