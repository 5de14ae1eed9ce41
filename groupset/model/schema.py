"""Schema: declared column types and grouping rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from groupset.model.errors import InvalidRuleError, UnknownColumnError
from groupset.model.types import INT32_MAX, INT32_MIN, Attr


@dataclass(frozen=True)
class Unique:
    """The column's exact value contributes to the group key."""


@dataclass(frozen=True)
class Interval:
    """Bucket a numeric column into half-open ranges of width *step*.

    A value v lands in bucket ``floor((v - start) / step)``.
    """

    start: int
    step: int

    def __post_init__(self) -> None:
        for name in ("start", "step"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidRuleError(f"Interval {name} must be an int, got {value!r}")
            if not INT32_MIN <= value <= INT32_MAX:
                raise InvalidRuleError(f"Interval {name} out of 32-bit range: {value}")
        if self.step == 0:
            raise InvalidRuleError("Interval step must be nonzero")

    def bucket(self, value: int) -> int:
        """Return the bucket index of an integer value."""
        return (value - self.start) // self.step


ComponentRule = Union[Unique, Interval]


class Schema:
    """Registry of column types and the grouping rules that derive group keys.

    Build it once with ``register`` before constructing any record, then
    treat it as read-only.
    """

    def __init__(self) -> None:
        self._types: dict[str, Attr] = {}
        self._rules: dict[str, ComponentRule] = {}

    def register(
        self,
        name: str,
        type_sample: Attr,
        grouping_rule: ComponentRule | None = None,
    ) -> None:
        """Declare *name* with the kind of *type_sample*.

        Re-registering a column replaces its type, and its grouping rule when
        one is given.
        """
        if grouping_rule is not None:
            check_rule(name, type_sample, grouping_rule)
            self._rules[name] = grouping_rule
        self._types[name] = type_sample

    def declared_type(self, name: str) -> Attr:
        """Return the type sample registered for *name*."""
        if name not in self._types:
            raise UnknownColumnError(name)
        return self._types[name]

    def rule(self, name: str) -> ComponentRule | None:
        """Return the grouping rule for *name*, or None if it does not group."""
        return self._rules.get(name)

    @property
    def declared_types(self) -> dict[str, Attr]:
        """Return a copy of the column -> type sample mapping."""
        return dict(self._types)

    @property
    def grouping_rules(self) -> dict[str, ComponentRule]:
        """Return a copy of the column -> grouping rule mapping."""
        return dict(self._rules)

    def grouping_columns(self) -> list[str]:
        """Return the grouping columns in key-derivation order (sorted by name)."""
        return sorted(self._rules)

    def columns(self) -> list[str]:
        """Return all declared column names, in registration order."""
        return list(self._types)

    def __contains__(self, name: str) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self) -> str:
        parts = []
        for name, sample in self._types.items():
            rule = self._rules.get(name)
            suffix = f" {rule!r}" if rule is not None else ""
            parts.append(f"{name}: {sample.kind.value}{suffix}")
        return "Schema(" + ", ".join(parts) + ")"


def check_rule(name: str, type_sample: Attr, rule: ComponentRule) -> None:
    """Reject an Interval rule on a non-numeric column."""
    if isinstance(rule, Interval) and not type_sample.is_numeric:
        raise InvalidRuleError(
            f"Interval rule on column {name!r} requires int or float, "
            f"not {type_sample.kind.value}"
        )
