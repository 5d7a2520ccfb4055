"""Tests for dbx search commands."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from dbindexer.backend.memory import InMemoryBackend
from dbindexer.cli.main import cli

runner = CliRunner()


@pytest.fixture
def search_config(tmp_path: Path) -> Iterator[Path]:
    path = tmp_path / "config.yaml"
    path.write_text(
        "logging:\n"
        "  outputs:\n"
        f"    - destination: {tmp_path / 'dbx.log'}\n"
    )
    with patch("dbindexer.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "missing.yaml"):
        yield path


@pytest.fixture
def shared_backend() -> Iterator[InMemoryBackend]:
    """One in-memory backend reused by every command of a test."""
    backend = InMemoryBackend()
    # Commands close the backend on exit; reopen it for the next one
    with patch(
        "dbindexer.indexing.manager.create_backend",
        side_effect=lambda *args, **kwargs: _reopened(backend),
    ):
        yield backend


def _reopened(backend: InMemoryBackend) -> InMemoryBackend:
    backend.closed = False
    return backend


def _invoke(config: Path, *args: str):
    return runner.invoke(cli, ["--config", str(config), "search", "--dry-run", *args])


class TestSearchAdd:
    def test_given_options_when_add_then_uuid_printed(self, search_config: Path) -> None:
        # When
        result = _invoke(
            search_config, "add", "--name", "Actors", "--database", "db-1", "--table", "t-1"
        )

        # Then
        assert result.exit_code == 0, result.output
        assert len(result.output.strip().splitlines()[-1]) == 36

    def test_given_uuid_when_add_then_search_stored(
        self, search_config: Path, shared_backend: InMemoryBackend
    ) -> None:
        # When
        result = _invoke(
            search_config,
            "add",
            "--uuid",
            "s-1",
            "--name",
            "Actors",
            "--database",
            "db-1",
            "--table",
            "t-1",
            "--table-name",
            "actor",
            "--search-info",
            '{"q": "P*"}',
        )

        # Then
        assert result.exit_code == 0, result.output
        [doc] = shared_backend.documents("dbv-searches")
        assert doc["id"] == "s-1"
        assert doc["table_name"] == "actor"
        assert "date_added" in doc

    def test_given_missing_name_when_add_then_usage_error(self, search_config: Path) -> None:
        result = _invoke(search_config, "add", "--database", "db-1", "--table", "t-1")
        assert result.exit_code == 2


class TestSearchEditDelete:
    def test_given_stored_search_when_edit_then_renamed(
        self, search_config: Path, shared_backend: InMemoryBackend
    ) -> None:
        # Given
        _invoke(
            search_config, "add", "--uuid", "s-1", "--name", "Old", "--database", "d", "--table", "t"
        )

        # When
        result = _invoke(search_config, "edit", "s-1", "--name", "New", "--description", "desc")

        # Then
        assert result.exit_code == 0, result.output
        [doc] = shared_backend.documents("dbv-searches")
        assert doc["name"] == "New"
        assert doc["description"] == "desc"
        assert doc["database_uuid"] == "d"

    def test_given_stored_search_when_delete_then_removed(
        self, search_config: Path, shared_backend: InMemoryBackend
    ) -> None:
        # Given
        _invoke(
            search_config, "add", "--uuid", "s-1", "--name", "Old", "--database", "d", "--table", "t"
        )

        # When
        result = _invoke(search_config, "delete", "s-1")

        # Then
        assert result.exit_code == 0, result.output
        assert "s-1" in result.output
        assert shared_backend.documents("dbv-searches") == []

    def test_given_unreachable_backend_when_delete_then_error(self, search_config: Path) -> None:
        # Given
        with patch("dbindexer.indexing.manager.create_backend") as mock_create:
            backend = InMemoryBackend()
            backend.closed = True
            mock_create.return_value = backend

            # When
            result = _invoke(search_config, "delete", "s-1")

        # Then
        assert result.exit_code == 1
        assert "PROVISION_FAILED" in result.output
        assert "unreachable" in result.output
