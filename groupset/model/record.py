"""Record: an immutable typed row with a precomputed group id."""

from __future__ import annotations

import hashlib
import itertools
from typing import Iterable

from groupset.model.errors import MissingGroupingAttributeError
from groupset.model.schema import ComponentRule, Interval, Schema, Unique, check_rule
from groupset.model.types import Attr, AttrKind, trunc_to_int32

# Surrogate identities; records are set members by identity, not by value.
_record_ids = itertools.count(1)


class Record:
    """An immutable row mapping column names to Attr values.

    Two records built from identical input are still distinct: equality and
    hashing use object identity, and ``record_id`` is the stable key that
    groups and collections use for set membership.
    """

    __slots__ = ("_attrs", "_group_id", "_record_id")

    def __init__(self, attrs: dict[str, Attr], group_id: int) -> None:
        object.__setattr__(self, "_attrs", dict(attrs))
        object.__setattr__(self, "_group_id", group_id)
        object.__setattr__(self, "_record_id", next(_record_ids))

    @classmethod
    def build(cls, schema: Schema, raw_columns: Iterable[tuple[str, str]]) -> Record:
        """Parse raw ``(name, text)`` pairs against *schema* and derive the group id.

        The first column that fails to parse aborts construction with its
        error. A grouping column missing from the input raises
        MissingGroupingAttributeError.
        """
        attrs: dict[str, Attr] = {}
        for name, raw in raw_columns:
            attrs[name] = Attr.parse(schema, name, raw)
        return cls(attrs, derive_group_id(schema, attrs))

    @property
    def group_id(self) -> int:
        return self._group_id

    @property
    def record_id(self) -> int:
        return self._record_id

    @property
    def data(self) -> dict[str, Attr]:
        """Return a copy of the underlying attributes."""
        return dict(self._attrs)

    def get(self, name: str, default: Attr | None = None) -> Attr | None:
        return self._attrs.get(name, default)

    def attributes(self) -> frozenset[str]:
        return frozenset(self._attrs)

    def __getitem__(self, name: str) -> Attr:
        return self._attrs[name]

    def __contains__(self, name: str) -> bool:
        return name in self._attrs

    def __repr__(self) -> str:
        parts = [f"{k}: {v!r}" for k, v in self._attrs.items()]
        return f"Record#{self._record_id}(" + ", ".join(parts) + ")"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Record is immutable")


def derive_group_id(schema: Schema, attrs: dict[str, Attr]) -> int:
    """Combine the bucketed grouping columns into an unsigned 64-bit key.

    Columns are visited in the schema's grouping order, so the key does not
    depend on the order the row supplied its columns in.
    """
    hasher = hashlib.blake2b(digest_size=8)
    for name in schema.grouping_columns():
        if name not in attrs:
            raise MissingGroupingAttributeError(name)
        part = _contribution(name, attrs[name], schema.rule(name))
        hasher.update(len(part).to_bytes(4, "big"))
        hasher.update(part)
    return int.from_bytes(hasher.digest(), "big")


def _contribution(name: str, attr: Attr, rule: ComponentRule) -> bytes:
    """Encode one column's bucketed value for hashing."""
    check_rule(name, attr, rule)
    kind = attr.kind
    if kind is AttrKind.INT:
        return b"i" + str(_bucket(attr.value, rule)).encode()
    if kind is AttrKind.FLOAT:
        return b"i" + str(_bucket(trunc_to_int32(attr.value), rule)).encode()
    if kind is AttrKind.BOOL:
        return b"b1" if attr.value else b"b0"
    if kind is AttrKind.TEXT:
        return b"s" + attr.value.encode("utf-8")
    raise AssertionError(f"unhandled attribute kind: {kind!r}")


def _bucket(value: int, rule: ComponentRule) -> int:
    if isinstance(rule, Interval):
        return rule.bucket(value)
    if isinstance(rule, Unique):
        return value
    raise AssertionError(f"unhandled grouping rule: {rule!r}")
