"""CLI utilities."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import click

from dbindexer.config import DbIndexerConfig, load_config
from dbindexer.core.errors import DbIndexerError
from dbindexer.core.logging import configure_logging


def load_cli_config(ctx: click.Context, url: str | None = None) -> DbIndexerConfig:
    """Resolve configuration for a command and reconfigure logging from it.

    Args:
        ctx: Click context carrying ``config_path`` and ``verbose``
        url: Backend URL override from the command line

    Raises:
        click.ClickException: If the configuration is invalid
    """
    obj = ctx.ensure_object(dict)
    config_path: Path | None = obj.get("config_path")
    overrides: dict[str, Any] = {}
    if url:
        overrides["backend"] = {"url": url}

    try:
        config = load_config(config_path, **overrides)
    except DbIndexerError as e:
        raise click.ClickException(str(e)) from e

    if obj.get("verbose"):
        config.logging.level = "DEBUG"
    configure_logging(config=config.logging)
    return config


@contextmanager
def reported_errors() -> Iterator[None]:
    """Turn structured errors into ClickException (exit code 1)."""
    try:
        yield
    except DbIndexerError as e:
        raise click.ClickException(str(e)) from e
