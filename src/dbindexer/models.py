"""Domain entities accepted by the IndexManager.

These describe preserved databases only as far as indexing needs them:
enough structure to derive collection names and build documents.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime

from pydantic import BaseModel, Field


class ViewerColumn(BaseModel):
    """A column of a preserved table."""

    name: str
    type_name: str = "VARCHAR"
    description: str | None = None
    nullable: bool = True


class ViewerTable(BaseModel):
    """A table. Its rows live in a collection derived from ``uuid``."""

    uuid: str
    name: str
    schema_name: str = ""
    description: str | None = None
    columns: list[ViewerColumn] = Field(default_factory=list)
    row_count: int = 0


class ViewerSchema(BaseModel):
    name: str
    description: str | None = None
    tables: list[ViewerTable] = Field(default_factory=list)


class ViewerDatabase(BaseModel):
    """A preserved database and its structural metadata."""

    uuid: str
    name: str
    description: str | None = None
    archival_date: datetime | None = None
    schemas: list[ViewerSchema] = Field(default_factory=list)

    def tables(self) -> Iterator[ViewerTable]:
        """Iterate over the tables of every schema."""
        for schema in self.schemas:
            yield from schema.tables


class ViewerRow(BaseModel):
    """One table row. Cells are keyed by column index."""

    uuid: str
    cells: dict[int, str | None] = Field(default_factory=dict)


class SavedSearch(BaseModel):
    """A search a user saved for later, stored in the searches collection."""

    uuid: str
    name: str
    description: str | None = None
    database_uuid: str
    table_uuid: str
    table_name: str = ""
    search_info: str = ""
    date_added: datetime | None = None


class DatabaseExport(BaseModel):
    """Ingest file format: one database plus its rows keyed by table uuid."""

    database: ViewerDatabase
    rows: dict[str, list[ViewerRow]] = Field(default_factory=dict)
