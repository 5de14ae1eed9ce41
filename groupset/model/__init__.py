"""Data model: Attr, Schema, Record, Group and Collection."""

from groupset.model.collection import Collection, FilterCondition, Group
from groupset.model.errors import (
    AggregationTypeError,
    GroupsetError,
    InvalidRuleError,
    MissingGroupingAttributeError,
    TypeMismatchError,
    UnknownColumnError,
)
from groupset.model.record import Record
from groupset.model.schema import ComponentRule, Interval, Schema, Unique
from groupset.model.store import RecordStore
from groupset.model.types import Attr, AttrKind, Ordering

__all__ = [
    "AggregationTypeError",
    "Attr",
    "AttrKind",
    "Collection",
    "ComponentRule",
    "FilterCondition",
    "Group",
    "GroupsetError",
    "Interval",
    "InvalidRuleError",
    "MissingGroupingAttributeError",
    "Ordering",
    "Record",
    "RecordStore",
    "Schema",
    "TypeMismatchError",
    "Unique",
    "UnknownColumnError",
]
