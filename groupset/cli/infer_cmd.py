"""CLI subcommand: infer."""

from __future__ import annotations

import json
import pathlib

import click

from groupset.data.config import parse_group_spec, save_schema, schema_to_config
from groupset.data.loader import infer_schema, read_table
from groupset.model.errors import GroupsetError


@click.command("infer")
@click.argument(
    "data", type=click.Path(exists=True, dir_okay=False, path_type=pathlib.Path)
)
@click.option(
    "--group",
    "group_specs",
    multiple=True,
    help="Grouping column: name (exact value) or name:start:step (interval).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=pathlib.Path),
    help="Write the schema to this file instead of stdout.",
)
def infer_cmd(
    data: pathlib.Path,
    group_specs: tuple[str, ...],
    output: pathlib.Path | None,
) -> None:
    """Infer a schema from a CSV file and print it as JSON."""
    try:
        group_by = [parse_group_spec(s) for s in group_specs]
        with open(data, newline="", encoding="utf-8") as f:
            headers, rows = read_table(f)
        schema = infer_schema(headers, rows, group_by)
    except GroupsetError as e:
        raise click.ClickException(str(e))
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Cannot read {data}: {e}")

    if output is not None:
        save_schema(schema, output)
    else:
        click.echo(json.dumps(schema_to_config(schema), indent=2))
