"""CSV loading: turn delimited text into raw column pairs and records."""

from __future__ import annotations

import csv
import logging
from typing import Iterable, Iterator, TextIO

from groupset.model.errors import GroupsetError, TypeMismatchError
from groupset.model.schema import ComponentRule, Schema
from groupset.model.store import RecordStore
from groupset.model.types import Attr, AttrKind

logger = logging.getLogger(__name__)

RawRow = list[tuple[str, str]]


class LoadError(GroupsetError):
    """Raised when data loading fails."""


def read_table(source: TextIO) -> tuple[list[str], list[list[str]]]:
    """Read CSV text into a header list and the data rows.

    Rows whose width differs from the header are skipped.
    """
    reader = csv.reader(source)
    try:
        headers = next(reader)
    except StopIteration:
        return [], []

    headers = [h.strip() for h in headers]
    rows: list[list[str]] = []
    for line_no, row in enumerate(reader, start=2):
        if len(row) != len(headers):
            logger.warning(
                "Skipping malformed line %d: expected %d fields, got %d",
                line_no,
                len(headers),
                len(row),
            )
            continue
        rows.append(row)
    return headers, rows


def raw_pairs(headers: list[str], row: list[str], schema: Schema) -> RawRow:
    """Pair each cell with its column name.

    Empty cells are left out unless the column is declared text, so they
    reach the record as missing attributes rather than parse errors.
    """
    pairs: RawRow = []
    for name, value in zip(headers, row):
        if value == "" and name in schema:
            if schema.declared_type(name).kind is not AttrKind.TEXT:
                continue
        pairs.append((name, value))
    return pairs


def iter_raw_rows(
    headers: list[str], rows: Iterable[list[str]], schema: Schema
) -> Iterator[RawRow]:
    for row in rows:
        yield raw_pairs(headers, row, schema)


def infer_schema(
    headers: list[str],
    rows: list[list[str]],
    group_by: Iterable[tuple[str, ComponentRule]] = (),
) -> Schema:
    """Infer a type per column from the data and apply grouping rules.

    Priority: int > float > bool > text. Empty cells are ignored; a column
    with no non-empty value is text.
    """
    schema = Schema()
    for i, name in enumerate(headers):
        kind = _infer_column_kind([row[i] for row in rows])
        schema.register(name, Attr.sample(kind))
    for name, rule in group_by:
        if name not in schema:
            raise LoadError(f"Cannot group by {name!r}: no such column")
        schema.register(name, schema.declared_type(name), rule)
    return schema


def _infer_column_kind(values: list[str]) -> AttrKind:
    """Infer the kind for a single column's values."""
    non_empty = [v for v in values if v != ""]
    if not non_empty:
        return AttrKind.TEXT
    for kind in (AttrKind.INT, AttrKind.FLOAT, AttrKind.BOOL):
        if all(_parses_as(kind, v) for v in non_empty):
            return kind
    return AttrKind.TEXT


def _parses_as(kind: AttrKind, value: str) -> bool:
    try:
        Attr.parse_as(kind, value)
        return True
    except TypeMismatchError:
        return False


def load_csv(
    source: TextIO,
    schema: Schema | None = None,
    *,
    group_by: Iterable[tuple[str, ComponentRule]] = (),
    skip_invalid: bool = True,
) -> RecordStore:
    """Read CSV data from a text stream into a RecordStore.

    The first row holds the column names. Without a *schema* one is
    inferred from the data, grouped by *group_by*. Rows that fail to build
    are skipped and listed in ``store.rejected`` unless *skip_invalid* is
    false.
    """
    headers, rows = read_table(source)
    if schema is None:
        schema = infer_schema(headers, rows, group_by)
    elif group_by:
        raise LoadError("group_by applies only to an inferred schema")

    store = RecordStore(schema)
    store.add_rows(iter_raw_rows(headers, rows, schema), skip_invalid=skip_invalid)
    logger.info(
        "Loaded %d records (%d rejected)", len(store), len(store.rejected)
    )
    return store
