"""Exceptions raised while building records, schemas and folds."""

from __future__ import annotations


class GroupsetError(Exception):
    """Base class for all groupset errors."""


class UnknownColumnError(GroupsetError):
    """Raised when raw input references a column absent from the schema."""

    def __init__(self, column: str) -> None:
        super().__init__(f"Unknown column: {column!r}")
        self.column = column


class TypeMismatchError(GroupsetError):
    """Raised when raw text cannot be parsed as the column's declared type."""

    def __init__(self, column: str, raw: str, expected: str) -> None:
        super().__init__(
            f"Expected {expected} for column {column!r}, got {raw!r}"
        )
        self.column = column
        self.raw = raw
        self.expected = expected


class MissingGroupingAttributeError(GroupsetError):
    """Raised when a row lacks a value for a grouping column."""

    def __init__(self, column: str) -> None:
        super().__init__(f"Missing value for grouping column {column!r}")
        self.column = column


class InvalidRuleError(GroupsetError):
    """Raised for an Interval rule with step 0 or on a non-numeric column."""


class AggregationTypeError(GroupsetError):
    """Raised when a fold targets a non-numeric attribute."""

    def __init__(self, attr: str, kind: str) -> None:
        super().__init__(
            f"Aggregation must target a numeric attribute: {attr!r} is {kind}"
        )
        self.attr = attr
        self.kind = kind
