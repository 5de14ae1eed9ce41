"""groupset: group tabular records by derived keys, combine and fold the groups."""

from groupset.executor.aggregates import Average, Count, FoldResult, Sum, fold
from groupset.model import (
    AggregationTypeError,
    Attr,
    AttrKind,
    Collection,
    FilterCondition,
    Group,
    GroupsetError,
    Interval,
    InvalidRuleError,
    MissingGroupingAttributeError,
    Ordering,
    Record,
    RecordStore,
    Schema,
    TypeMismatchError,
    Unique,
    UnknownColumnError,
)

__all__ = [
    "AggregationTypeError",
    "Attr",
    "AttrKind",
    "Average",
    "Collection",
    "Count",
    "FilterCondition",
    "FoldResult",
    "Group",
    "GroupsetError",
    "Interval",
    "InvalidRuleError",
    "MissingGroupingAttributeError",
    "Ordering",
    "Record",
    "RecordStore",
    "Schema",
    "Sum",
    "TypeMismatchError",
    "Unique",
    "UnknownColumnError",
    "fold",
]
