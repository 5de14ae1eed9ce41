"""Group and Collection: records partitioned by group id, with set algebra."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, Mapping

from groupset.model.types import Attr, Ordering

if TYPE_CHECKING:
    from groupset.executor.aggregates import FoldOperation, FoldResult
    from groupset.model.record import Record

logger = logging.getLogger(__name__)


class Group:
    """An immutable set of records sharing one group id.

    Membership is keyed by ``Record.record_id``; two records with equal
    attributes are still two members.
    """

    __slots__ = ("_id", "_members", "_hash")

    def __init__(self, group_id: int, records: Iterable[Record] = ()) -> None:
        members: dict[int, Record] = {}
        for record in records:
            if record.group_id != group_id:
                raise ValueError(
                    f"Record {record.record_id} has group id {record.group_id}, "
                    f"not {group_id}"
                )
            members[record.record_id] = record
        object.__setattr__(self, "_id", group_id)
        object.__setattr__(self, "_members", members)
        object.__setattr__(self, "_hash", None)

    @classmethod
    def _from_members(cls, group_id: int, members: dict[int, Record]) -> Group:
        """Wrap an already validated record_id -> Record mapping."""
        group = cls.__new__(cls)
        object.__setattr__(group, "_id", group_id)
        object.__setattr__(group, "_members", members)
        object.__setattr__(group, "_hash", None)
        return group

    @property
    def id(self) -> int:
        return self._id

    @property
    def records(self) -> tuple[Record, ...]:
        """Return the members in insertion order."""
        return tuple(self._members.values())

    @property
    def record_ids(self) -> frozenset[int]:
        return frozenset(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._members.values())

    def __contains__(self, record: Record) -> bool:
        return self._members.get(record.record_id) is record

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Group):
            return NotImplemented
        return self._id == other._id and self._members.keys() == other._members.keys()

    def __hash__(self) -> int:
        if self._hash is None:
            object.__setattr__(self, "_hash", hash((self._id, frozenset(self._members))))
        return self._hash

    def __repr__(self) -> str:
        return f"Group({self._id:#018x}, {len(self._members)} records)"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Group is immutable")


@dataclass(frozen=True)
class FilterCondition:
    """Keep records whose *attr_name* compares to *value* as *ordering*.

    Records lacking the attribute, or holding a value of another kind, never
    match.
    """

    attr_name: str
    value: Attr
    ordering: Ordering

    def matches(self, record: Record) -> bool:
        attr = record.get(self.attr_name)
        if attr is None:
            return False
        return attr.compare(self.value) is self.ordering

    def __str__(self) -> str:
        return f"{self.attr_name} {self.ordering.value} {self.value}"


class Collection:
    """An immutable mapping of group id -> Group.

    Never holds an empty group; groups passed in with the same id are
    merged. Every set operation returns a new
    Collection and leaves its operands untouched.
    """

    __slots__ = ("_groups",)

    def __init__(self, groups: Mapping[int, Group] | Iterable[Group] = ()) -> None:
        if isinstance(groups, Mapping):
            groups = groups.values()
        merged: dict[int, Group] = {}
        for group in groups:
            if len(group) == 0:
                continue
            seen = merged.get(group.id)
            if seen is None:
                merged[group.id] = group
            else:
                merged[group.id] = Group._from_members(
                    group.id, {**seen._members, **group._members}
                )
        object.__setattr__(self, "_groups", merged)

    @classmethod
    def build(cls, records: Iterable[Record]) -> Collection:
        """Partition *records* by group id, keeping encounter order."""
        buckets: dict[int, dict[int, Record]] = {}
        for record in records:
            buckets.setdefault(record.group_id, {})[record.record_id] = record
        result = cls._wrap(
            {gid: Group._from_members(gid, members) for gid, members in buckets.items()}
        )
        logger.debug(
            "Built collection of %d groups from %d records",
            len(result),
            result.record_count(),
        )
        return result

    @classmethod
    def _wrap(cls, groups: dict[int, Group]) -> Collection:
        collection = cls.__new__(cls)
        object.__setattr__(collection, "_groups", groups)
        return collection

    @property
    def groups(self) -> dict[int, Group]:
        """Return a copy of the group id -> Group mapping."""
        return dict(self._groups)

    def group_ids(self) -> frozenset[int]:
        return frozenset(self._groups)

    def get(self, group_id: int) -> Group | None:
        return self._groups.get(group_id)

    def records(self) -> Iterator[Record]:
        """Iterate over every record of every group."""
        for group in self._groups.values():
            yield from group

    def record_count(self) -> int:
        return sum(len(g) for g in self._groups.values())

    def __getitem__(self, group_id: int) -> Group:
        return self._groups[group_id]

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[Group]:
        return iter(self._groups.values())

    def __contains__(self, group_id: int) -> bool:
        return group_id in self._groups

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Collection):
            return NotImplemented
        return self._groups == other._groups

    def __hash__(self) -> int:
        return hash(frozenset(self._groups.values()))

    def __repr__(self) -> str:
        return f"Collection({len(self._groups)} groups, {self.record_count()} records)"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Collection is immutable")

    # --- Set algebra ---

    def filter(self, condition: FilterCondition) -> Collection:
        """Keep only records matching *condition*; drop groups left empty."""
        result: dict[int, Group] = {}
        for gid, group in self._groups.items():
            members = {
                rid: r for rid, r in group._members.items() if condition.matches(r)
            }
            if members:
                result[gid] = Group._from_members(gid, members)
        logger.debug("filter(%s): %d -> %d groups", condition, len(self), len(result))
        return Collection._wrap(result)

    def intersect(self, other: Collection) -> Collection:
        """Records present (by identity) in both collections, per shared group id."""
        result: dict[int, Group] = {}
        for gid, group in self._groups.items():
            other_group = other._groups.get(gid)
            if other_group is None:
                continue
            members = {
                rid: r for rid, r in group._members.items() if rid in other_group._members
            }
            if members:
                result[gid] = Group._from_members(gid, members)
        logger.debug("intersect: %d & %d -> %d groups", len(self), len(other), len(result))
        return Collection._wrap(result)

    def unite(self, other: Collection) -> Collection:
        """Records present in either collection, per group id."""
        result = dict(self._groups)
        for gid, other_group in other._groups.items():
            group = result.get(gid)
            if group is None:
                result[gid] = other_group
            else:
                result[gid] = Group._from_members(
                    gid, {**group._members, **other_group._members}
                )
        logger.debug("unite: %d | %d -> %d groups", len(self), len(other), len(result))
        return Collection._wrap(result)

    def subtract(self, other: Collection) -> Collection:
        """Records of this collection not present (by identity) in *other*."""
        result: dict[int, Group] = {}
        for gid, group in self._groups.items():
            other_group = other._groups.get(gid)
            if other_group is None:
                result[gid] = group
                continue
            members = {
                rid: r for rid, r in group._members.items() if rid not in other_group._members
            }
            if members:
                result[gid] = Group._from_members(gid, members)
        logger.debug("subtract: %d - %d -> %d groups", len(self), len(other), len(result))
        return Collection._wrap(result)

    def fold(self, operation: FoldOperation) -> FoldResult:
        """Aggregate each group; see ``groupset.executor.aggregates.fold``."""
        from groupset.executor.aggregates import fold

        return fold(self, operation)
