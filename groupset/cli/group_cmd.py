"""CLI subcommand: group."""

from __future__ import annotations

import pathlib
import re

import click

from groupset.cli.formatter import format_collection, format_fold_result, format_records
from groupset.data.config import load_schema, parse_group_spec
from groupset.data.loader import load_csv
from groupset.executor.aggregates import fold, parse_operation
from groupset.model.collection import Collection, FilterCondition
from groupset.model.errors import GroupsetError
from groupset.model.schema import Schema
from groupset.model.types import Attr, Ordering

_CONDITION_RE = re.compile(r"\s*([^<>=]+?)\s*([<>=])\s*(.*?)\s*")


def parse_condition(schema: Schema, text: str) -> FilterCondition:
    """Parse ``attr<value``, ``attr=value`` or ``attr>value``.

    The value is parsed with the attribute's declared type.
    """
    m = _CONDITION_RE.fullmatch(text)
    if m is None:
        raise click.BadParameter(
            f"{text!r} (expected attr<value, attr=value or attr>value)"
        )
    name, op, raw = m.groups()
    return FilterCondition(name, Attr.parse(schema, name, raw), Ordering(op))


def select(
    collection: Collection,
    where: list[FilterCondition],
    any_of: list[FilterCondition],
    exclude: list[FilterCondition],
) -> Collection:
    """Combine filtered views of *collection* with set algebra.

    Every *where* view is intersected, the union of the *any_of* views is
    intersected, and every *exclude* view is subtracted.
    """
    result = collection
    for cond in where:
        result = result.intersect(collection.filter(cond))
    if any_of:
        alternatives = Collection()
        for cond in any_of:
            alternatives = alternatives.unite(collection.filter(cond))
        result = result.intersect(alternatives)
    for cond in exclude:
        result = result.subtract(collection.filter(cond))
    return result


@click.command("group")
@click.argument(
    "data", type=click.Path(exists=True, dir_okay=False, path_type=pathlib.Path)
)
@click.option(
    "--schema",
    "schema_path",
    type=click.Path(exists=True, dir_okay=False, path_type=pathlib.Path),
    help="JSON schema file; inferred from the data when omitted.",
)
@click.option(
    "--group",
    "group_specs",
    multiple=True,
    help="Grouping column: name (exact value) or name:start:step (interval).",
)
@click.option("--where", multiple=True, help="Keep records matching every condition.")
@click.option("--any", "any_of", multiple=True, help="Keep records matching at least one condition.")
@click.option("--exclude", multiple=True, help="Drop records matching the condition.")
@click.option("--fold", "fold_spec", help="count, sum:ATTR or avg:ATTR")
@click.option("--members", is_flag=True, default=False, help="Also print the selected records.")
@click.option("--strict", is_flag=True, default=False, help="Fail on the first invalid row.")
def group_cmd(
    data: pathlib.Path,
    schema_path: pathlib.Path | None,
    group_specs: tuple[str, ...],
    where: tuple[str, ...],
    any_of: tuple[str, ...],
    exclude: tuple[str, ...],
    fold_spec: str | None,
    members: bool,
    strict: bool,
) -> None:
    """Group the rows of a CSV file and print the groups or a fold over them."""
    try:
        operation = parse_operation(fold_spec) if fold_spec else None
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--fold")

    try:
        group_by = [parse_group_spec(s) for s in group_specs]
        schema = None
        if schema_path is not None:
            schema = load_schema(schema_path)
            for name, rule in group_by:
                schema.register(name, schema.declared_type(name), rule)
            group_by = []
        with open(data, newline="", encoding="utf-8") as f:
            store = load_csv(f, schema, group_by=group_by, skip_invalid=not strict)
        schema = store.schema

        selected = select(
            store.collection(),
            [parse_condition(schema, c) for c in where],
            [parse_condition(schema, c) for c in any_of],
            [parse_condition(schema, c) for c in exclude],
        )
        if operation is None:
            click.echo(format_collection(selected, schema))
        else:
            click.echo(format_fold_result(fold(selected, operation), schema))
        if members:
            click.echo(format_records(list(selected.records()), schema.columns()))
    except GroupsetError as e:
        raise click.ClickException(str(e))
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Cannot read {data}: {e}")

    if store.rejected:
        click.echo(f"Skipped {len(store.rejected)} invalid row(s)", err=True)
