"""IndexManager: entity-level indexing operations.

Translates databases, tables, rows and saved searches into documents and
drives the pipeline. Provisioning policy lives here:

- the databases collection is required: a ProvisionError is fatal
- the saved-searches collection is required by saved-search operations,
  and only attempted opportunistically by add_database
- per-table collections are best effort: failures are logged and rows are
  still written, since the collection may show up shortly
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from types import TracebackType

import structlog

from dbindexer.backend import SearchBackend, create_backend
from dbindexer.config.models import DbIndexerConfig
from dbindexer.core.errors import ProvisionError
from dbindexer.indexing.documents import (
    from_database,
    from_row,
    from_saved_search,
    saved_search_update,
    table_collection_name,
)
from dbindexer.indexing.pipeline import IndexingPipeline
from dbindexer.indexing.provision import CollectionProvisioner
from dbindexer.indexing.retry import RetryPolicy
from dbindexer.models import DatabaseExport, SavedSearch, ViewerDatabase, ViewerRow, ViewerTable

logger = structlog.get_logger()


@dataclass
class IngestStats:
    """Summary of one database export ingestion."""

    database_uuid: str
    tables: int = 0
    rows: int = 0
    skipped_rows: int = 0
    committed_collections: int = 0
    duration_seconds: float = 0.0


class IndexManager:
    """
    Facade over provisioning, buffering, flushing and committing.

    Usage::

        with IndexManager.connect(load_config()) as manager:
            manager.add_database(database)
            for table in database.tables():
                manager.add_table(table)
                for row in rows[table.uuid]:
                    manager.add_row(table, row)
            manager.commit_all()

    Leaving the block releases the backend connection. Anything not
    committed by then is discarded.
    """

    def __init__(
        self,
        backend: SearchBackend,
        config: DbIndexerConfig | None = None,
        *,
        policy: RetryPolicy | None = None,
    ):
        self.config = config or DbIndexerConfig()
        self._names = self.config.collections
        self._provisioner = CollectionProvisioner(backend, num_shards=self._names.num_shards)
        self._pipeline = IndexingPipeline(
            backend,
            self.config.buffer,
            policy or RetryPolicy.from_config(self.config.retry),
        )
        self._table_collections: set[str] = set()

    @classmethod
    def connect(cls, config: DbIndexerConfig, *, dry_run: bool = False) -> IndexManager:
        """Build a manager over the backend described by ``config``."""
        return cls(create_backend(config.backend, dry_run=dry_run), config)

    @property
    def pipeline(self) -> IndexingPipeline:
        return self._pipeline

    def table_collection(self, table_uuid: str) -> str:
        return table_collection_name(table_uuid, self._names.table_collection_prefix)

    # -------------------------------------------------------------------------
    # Databases, tables and rows
    # -------------------------------------------------------------------------

    def add_database(self, database: ViewerDatabase) -> None:
        """Index a database and prepare the saved-searches collection.

        Raises:
            ProvisionError: If the databases collection cannot be created.
            FlushError: If a triggered flush failed.
        """
        self._provisioner.ensure(self._names.database_collection, self._names.database_configset)
        self._pipeline.enqueue(self._names.database_collection, from_database(database))
        logger.info("database_added", database=database.uuid, name=database.name)

        try:
            self._ensure_searches_collection()
        except ProvisionError as e:
            logger.error("searches_collection_unavailable", error=str(e))

    def add_table(self, table: ViewerTable) -> str:
        """Create the collection that will hold the rows of ``table``.

        Returns:
            The derived collection name.
        """
        collection = self.table_collection(table.uuid)
        self._ensure_table_collection(collection, table)
        return collection

    def add_row(self, table: ViewerTable, row: ViewerRow) -> None:
        """Index one row into its table's collection.

        Raises:
            InvalidDocumentError: If the row has no uuid.
            FlushError: If a triggered flush failed.
        """
        collection = self.table_collection(table.uuid)
        if collection not in self._table_collections:
            self._ensure_table_collection(collection, table)
        self._pipeline.enqueue(collection, from_row(table, row))

    def _ensure_table_collection(self, collection: str, table: ViewerTable) -> None:
        self._table_collections.add(collection)
        try:
            self._provisioner.ensure(collection, self._names.table_configset)
        except ProvisionError as e:
            logger.error(
                "table_collection_not_created",
                collection=collection,
                table=table.name,
                table_uuid=table.uuid,
                error=str(e),
            )

    def add_database_export(self, export: DatabaseExport) -> IngestStats:
        """Ingest a whole export: database, table collections, rows, commit."""
        start = time.monotonic()
        database = export.database
        stats = IngestStats(database_uuid=database.uuid)

        self.add_database(database)
        tables = {table.uuid: table for table in database.tables()}
        for table in tables.values():
            self.add_table(table)
            stats.tables += 1
            for row in export.rows.get(table.uuid, []):
                self.add_row(table, row)
                stats.rows += 1

        for table_uuid in export.rows.keys() - tables.keys():
            skipped = len(export.rows[table_uuid])
            stats.skipped_rows += skipped
            logger.warning("rows_for_unknown_table", table_uuid=table_uuid, rows=skipped)

        stats.committed_collections = len(self.commit_all())
        stats.duration_seconds = time.monotonic() - start
        return stats

    # -------------------------------------------------------------------------
    # Saved searches
    # -------------------------------------------------------------------------

    def _ensure_searches_collection(self) -> None:
        self._provisioner.ensure(self._names.searches_collection, self._names.searches_configset)

    def add_saved_search(self, search: SavedSearch) -> None:
        """Store a saved search and make it visible right away.

        Raises:
            ProvisionError: If the saved-searches collection cannot be created.
            FlushError: If the search could not be written.
            CommitError: If the collection could not be committed.
        """
        self._ensure_searches_collection()
        self._pipeline.enqueue(self._names.searches_collection, from_saved_search(search))
        self._pipeline.commit(self._names.searches_collection, soft_commit=True)
        logger.info("saved_search_added", search=search.uuid, name=search.name)

    def edit_saved_search(self, uuid: str, name: str, description: str | None) -> None:
        """Change the name and description of a saved search in place."""
        self._ensure_searches_collection()
        self._pipeline.enqueue(
            self._names.searches_collection, saved_search_update(uuid, name, description)
        )
        self._pipeline.commit(self._names.searches_collection)
        logger.info("saved_search_edited", search=uuid)

    def delete_saved_search(self, uuid: str) -> None:
        """Remove a saved search and commit the removal."""
        self._ensure_searches_collection()
        self._pipeline.delete(self._names.searches_collection, uuid)
        self._pipeline.commit(self._names.searches_collection)

    # -------------------------------------------------------------------------
    # Commit and release
    # -------------------------------------------------------------------------

    def commit_all(self) -> list[str]:
        """Commit and optimize every collection written since the last commit."""
        return self._pipeline.commit_all(optimize=True)

    def release_resources(self) -> None:
        """Close the backend connection. Idempotent; uncommitted documents are dropped."""
        self._pipeline.close()

    def __enter__(self) -> IndexManager:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release_resources()
