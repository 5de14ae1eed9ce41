"""ASCII table formatter for displaying collections and fold results."""

from __future__ import annotations

from groupset.executor.aggregates import FoldResult
from groupset.model.collection import Collection, Group
from groupset.model.record import Record
from groupset.model.schema import Interval, Schema
from groupset.model.types import Attr, AttrKind, trunc_to_int32


def format_value(value: Attr | None) -> str:
    """Format a single attribute for display."""
    if value is None:
        return ""
    if value.kind is AttrKind.FLOAT:
        return f"{value.value:g}"
    return str(value)


def describe_key(schema: Schema, record: Record) -> str:
    """Describe the bucket a record falls into on each grouping column."""
    parts = []
    for name in schema.grouping_columns():
        attr = record[name]
        rule = schema.rule(name)
        if isinstance(rule, Interval):
            base = attr.value if attr.kind is AttrKind.INT else trunc_to_int32(attr.value)
            lo = rule.start + rule.bucket(base) * rule.step
            hi = lo + rule.step
            parts.append(f"{name}=[{min(lo, hi)}, {max(lo, hi)})")
        elif attr.kind is AttrKind.FLOAT:
            parts.append(f"{name}={trunc_to_int32(attr.value)}")
        else:
            parts.append(f"{name}={attr}")
    return ", ".join(parts)


def _group_key(schema: Schema, group: Group) -> str:
    return describe_key(schema, group.records[0])


def format_collection(collection: Collection, schema: Schema) -> str:
    """Format a collection as one row per group."""
    if len(collection) == 0:
        return "(empty collection)"
    rows = [
        [f"{g.id:016x}", _group_key(schema, g), str(len(g))]
        for g in _sorted_groups(collection, schema)
    ]
    return _build_table(["group", "key", "records"], rows)


def format_fold_result(result: FoldResult, schema: Schema) -> str:
    """Format a fold result as one row per group."""
    if len(result) == 0:
        return "(empty collection)"
    rows = [
        [f"{g.id:016x}", _group_key(schema, g), format_value(result[g])]
        for g in _sorted_groups(result.collection, schema)
    ]
    return _build_table(["group", "key", str(result.operation)], rows)


def format_records(records: list[Record], columns: list[str]) -> str:
    """Format records as a table with the given column order."""
    if not records:
        return "(no records)"
    rows = [[format_value(r.get(c)) for c in columns] for r in records]
    return _build_table(columns, rows)


def _sorted_groups(collection: Collection, schema: Schema) -> list[Group]:
    """Order groups by key description so output is deterministic."""
    return sorted(collection, key=lambda g: (_group_key(schema, g), g.id))


def _build_table(headers: list[str], rows: list[list[str]]) -> str:
    """Build an ASCII table from headers and rows."""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    sep = "+-" + "-+-".join("-" * w for w in widths) + "-+"
    header = "| " + " | ".join(h.ljust(w) for h, w in zip(headers, widths)) + " |"

    lines = [sep, header, sep]
    for row in rows:
        lines.append("| " + " | ".join(c.ljust(w) for c, w in zip(row, widths)) + " |")
    lines.append(sep)
    return "\n".join(lines)
