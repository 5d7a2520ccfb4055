"""dbindexer CLI - dbx command."""

from pathlib import Path

import click

from dbindexer import __version__
from dbindexer.cli.ingest import ingest_command
from dbindexer.cli.search import search_group
from dbindexer.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="dbx")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """dbindexer - index preserved databases into a Solr-style search index."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(ingest_command, name="ingest")
cli.add_command(search_group, name="search")


if __name__ == "__main__":
    cli()
