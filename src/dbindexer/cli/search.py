"""dbx search commands - maintain saved searches."""

from datetime import datetime, timezone
from uuid import uuid4

import click

from dbindexer.cli.utils import load_cli_config, reported_errors
from dbindexer.indexing import IndexManager
from dbindexer.models import SavedSearch


@click.group()
@click.option("--url", default=None, help="Solr base URL (overrides config)")
@click.option("--dry-run", is_flag=True, help="Use an in-memory backend")
@click.pass_context
def search_group(ctx: click.Context, url: str | None, dry_run: bool) -> None:
    """Add, edit or delete saved searches."""
    obj = ctx.ensure_object(dict)
    obj["url"] = url
    obj["dry_run"] = dry_run


def _connect(ctx: click.Context) -> IndexManager:
    config = load_cli_config(ctx, ctx.obj.get("url"))
    return IndexManager.connect(config, dry_run=ctx.obj.get("dry_run", False))


@search_group.command("add")
@click.option("--name", required=True)
@click.option("--database", "database_uuid", required=True, help="Database uuid")
@click.option("--table", "table_uuid", required=True, help="Table uuid")
@click.option("--table-name", default="")
@click.option("--description", default=None)
@click.option("--search-info", default="", help="Serialized search parameters")
@click.option("--uuid", "search_uuid", default=None, help="Defaults to a new uuid4")
@click.pass_context
def add_command(
    ctx: click.Context,
    name: str,
    database_uuid: str,
    table_uuid: str,
    table_name: str,
    description: str | None,
    search_info: str,
    search_uuid: str | None,
) -> None:
    """Save a search."""
    search = SavedSearch(
        uuid=search_uuid or str(uuid4()),
        name=name,
        description=description,
        database_uuid=database_uuid,
        table_uuid=table_uuid,
        table_name=table_name,
        search_info=search_info,
        date_added=datetime.now(timezone.utc),
    )
    with reported_errors(), _connect(ctx) as manager:
        manager.add_saved_search(search)
    click.echo(search.uuid)


@search_group.command("edit")
@click.argument("search_uuid")
@click.option("--name", required=True)
@click.option("--description", default=None)
@click.pass_context
def edit_command(ctx: click.Context, search_uuid: str, name: str, description: str | None) -> None:
    """Rename a saved search and replace its description."""
    with reported_errors(), _connect(ctx) as manager:
        manager.edit_saved_search(search_uuid, name, description)
    click.echo(search_uuid)


@search_group.command("delete")
@click.argument("search_uuid")
@click.pass_context
def delete_command(ctx: click.Context, search_uuid: str) -> None:
    """Delete a saved search."""
    with reported_errors(), _connect(ctx) as manager:
        manager.delete_saved_search(search_uuid)
    click.echo(search_uuid)
