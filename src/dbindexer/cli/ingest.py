"""dbx ingest command - index a database export."""

import json
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console

from dbindexer.cli.utils import load_cli_config, reported_errors
from dbindexer.core.logging import clear_ingest_id, set_ingest_id
from dbindexer.indexing import IndexManager
from dbindexer.models import DatabaseExport


@click.command()
@click.argument("export_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--url", default=None, help="Solr base URL (overrides config)")
@click.option("--dry-run", is_flag=True, help="Index into an in-memory backend")
@click.option("--json", "as_json", is_flag=True, help="Output summary as JSON")
@click.pass_context
def ingest_command(
    ctx: click.Context, export_path: Path, url: str | None, dry_run: bool, as_json: bool
) -> None:
    """Index a database export and commit every collection it touched.

    EXPORT_PATH is a JSON file with a "database" object and "rows" keyed
    by table uuid.
    """
    config = load_cli_config(ctx, url)

    try:
        export = DatabaseExport.model_validate_json(export_path.read_text())
    except ValidationError as e:
        raise click.ClickException(f"Invalid export file {export_path}: {e}") from e

    console = Console(stderr=True)
    ingest_id = set_ingest_id()
    try:
        with reported_errors(), IndexManager.connect(config, dry_run=dry_run) as manager:
            with console.status(
                f"[cyan]Indexing {export.database.name}...[/cyan]", spinner="dots"
            ):
                stats = manager.add_database_export(export)
    finally:
        clear_ingest_id()

    if as_json:
        click.echo(
            json.dumps(
                {
                    "ingest_id": ingest_id,
                    "database": stats.database_uuid,
                    "tables": stats.tables,
                    "rows": stats.rows,
                    "skipped_rows": stats.skipped_rows,
                    "committed_collections": stats.committed_collections,
                    "duration_seconds": round(stats.duration_seconds, 3),
                    "dry_run": dry_run,
                }
            )
        )
        return

    console.print(
        f"  [green]✓[/green] {export.database.name}: {stats.tables} table(s), "
        f"{stats.rows} row(s), {stats.committed_collections} collection(s) committed "
        f"in {stats.duration_seconds:.2f}s"
    )
    if stats.skipped_rows:
        console.print(
            f"  [yellow]![/yellow] {stats.skipped_rows} row(s) skipped: table not in database"
        )
