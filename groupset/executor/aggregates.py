"""Fold engine: per-group count, sum and average over a Collection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Union

from groupset.model.collection import Collection, Group
from groupset.model.errors import AggregationTypeError
from groupset.model.record import Record
from groupset.model.types import Attr, AttrKind

logger = logging.getLogger(__name__)

# Contribution of a record that lacks the aggregated attribute. Partially
# populated records take part in sums and averages instead of raising, which
# means a group with missing values is silently under-counted.
MISSING_DEFAULT = 0.0


@dataclass(frozen=True)
class Count:
    """Number of records per group."""

    def __str__(self) -> str:
        return "count"


@dataclass(frozen=True)
class Sum:
    """Sum of a numeric attribute per group."""

    attr: str

    def __str__(self) -> str:
        return f"sum:{self.attr}"


@dataclass(frozen=True)
class Average:
    """Mean of a numeric attribute per group."""

    attr: str

    def __str__(self) -> str:
        return f"avg:{self.attr}"


FoldOperation = Union[Count, Sum, Average]


class FoldResult:
    """A snapshot of one scalar per group of a Collection."""

    __slots__ = ("_collection", "_operation", "_values")

    def __init__(
        self,
        collection: Collection,
        operation: FoldOperation,
        values: dict[int, Attr],
    ) -> None:
        object.__setattr__(self, "_collection", collection)
        object.__setattr__(self, "_operation", operation)
        object.__setattr__(self, "_values", dict(values))

    @property
    def collection(self) -> Collection:
        return self._collection

    @property
    def operation(self) -> FoldOperation:
        return self._operation

    def __getitem__(self, group: Group | int) -> Attr:
        gid = group.id if isinstance(group, Group) else group
        return self._values[gid]

    def get(self, group: Group | int, default: Attr | None = None) -> Attr | None:
        gid = group.id if isinstance(group, Group) else group
        return self._values.get(gid, default)

    def items(self) -> Iterator[tuple[Group, Attr]]:
        """Iterate over (group, scalar) pairs in collection order."""
        for group in self._collection:
            yield group, self._values[group.id]

    def as_dict(self) -> dict[int, int | float]:
        """Return group id -> plain Python scalar."""
        return {gid: attr.value for gid, attr in self._values.items()}

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Group]:
        return iter(self._collection)

    def __repr__(self) -> str:
        return f"FoldResult({self._operation}, {len(self._values)} groups)"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("FoldResult is immutable")


def fold(collection: Collection, operation: FoldOperation) -> FoldResult:
    """Compute *operation* for every group of *collection*."""
    values: dict[int, Attr] = {}
    for group in collection:
        if isinstance(operation, Count):
            values[group.id] = agg_count(group)
        elif isinstance(operation, Sum):
            values[group.id] = agg_sum(group, operation.attr)
        elif isinstance(operation, Average):
            values[group.id] = agg_mean(group, operation.attr)
        else:
            raise TypeError(f"Unknown fold operation: {operation!r}")
    logger.debug("fold(%s) over %d groups", operation, len(values))
    return FoldResult(collection, operation, values)


def agg_count(group: Group) -> Attr:
    """Number of members, as an Int attribute."""
    return Attr.of_int(len(group))


def agg_sum(group: Group, attr: str) -> Attr:
    """Sum of *attr* over the members, as a Float attribute."""
    return Attr.of_float(_total(group, attr))


def agg_mean(group: Group, attr: str) -> Attr:
    """Mean of *attr* over the members, as a Float attribute.

    Groups are never empty inside a Collection, so the count is at least one.
    """
    return Attr.of_float(_total(group, attr) / len(group))


def _total(group: Group, attr: str) -> float:
    return sum(_numeric_value(r, attr) for r in group)


def _numeric_value(record: Record, attr: str) -> float:
    """Widen a record's numeric attribute to float; MISSING_DEFAULT if absent."""
    value = record.get(attr)
    if value is None:
        return MISSING_DEFAULT
    kind = value.kind
    if kind is AttrKind.INT or kind is AttrKind.FLOAT:
        return float(value.value)
    if kind is AttrKind.BOOL or kind is AttrKind.TEXT:
        raise AggregationTypeError(attr, kind.value)
    raise AssertionError(f"unhandled attribute kind: {kind!r}")


def parse_operation(text: str) -> FoldOperation:
    """Parse ``count``, ``sum:ATTR`` or ``avg:ATTR`` into a fold operation."""
    name, _, attr = text.partition(":")
    name = name.strip().lower()
    attr = attr.strip()
    if name == "count":
        if attr:
            raise ValueError("count takes no attribute")
        return Count()
    if name in ("sum", "avg", "average"):
        if not attr:
            raise ValueError(f"{name} requires an attribute name")
        return Sum(attr) if name == "sum" else Average(attr)
    raise ValueError(f"Unknown fold operation: {text!r}")
