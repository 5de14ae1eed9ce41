"""CLI entry point for groupset."""

import click

from groupset.cli.group_cmd import group_cmd
from groupset.cli.infer_cmd import infer_cmd
from groupset.observability.logger import FORMAT_TYPES, LOG_LEVELS, setup_logger


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(list(LOG_LEVELS), case_sensitive=False),
    default=None,
    help="Log level (default: $GROUPSET_LOG_LEVEL or WARNING).",
)
@click.option(
    "--log-format",
    type=click.Choice(FORMAT_TYPES),
    default="text",
    show_default=True,
)
def main(log_level: str | None, log_format: str) -> None:
    """Group tabular records and fold over the groups."""
    setup_logger(log_level, log_format)


main.add_command(group_cmd)
main.add_command(infer_cmd)
