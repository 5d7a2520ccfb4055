"""Documents, collection names and entity transformers.

Transformers are pure: the same entity always yields the same document,
and a table uuid always yields the same collection name.
"""

from __future__ import annotations

import json
from datetime import datetime

from dbindexer.backend.base import Document
from dbindexer.config.constants import (
    DOCUMENT_ID_FIELD,
    ROW_COLUMN_FIELD_PREFIX,
    ROW_TABLE_ID_FIELD,
)
from dbindexer.core.errors import InvalidDocumentError
from dbindexer.models import SavedSearch, ViewerDatabase, ViewerRow, ViewerTable


def validate_document(document: Document | None, collection: str) -> Document:
    """Return ``document`` if it has a non-empty identity field.

    Raises:
        InvalidDocumentError: For a null document or a missing/empty id.
    """
    if document is None:
        raise InvalidDocumentError.null_document(collection)
    doc_id = document.get(DOCUMENT_ID_FIELD)
    if doc_id is None or (isinstance(doc_id, str) and not doc_id.strip()):
        raise InvalidDocumentError.missing_id(collection, DOCUMENT_ID_FIELD)
    return document


def table_collection_name(table_uuid: str, prefix: str) -> str:
    """Derived collection holding the rows of one table."""
    return f"{prefix}{table_uuid}"


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def from_database(database: ViewerDatabase) -> Document:
    tables = list(database.tables())
    metadata = {
        "schemas": [
            {
                "name": schema.name,
                "tables": [{"uuid": t.uuid, "name": t.name} for t in schema.tables],
            }
            for schema in database.schemas
        ]
    }
    doc: Document = {
        DOCUMENT_ID_FIELD: database.uuid,
        "name": database.name,
        "table_count": len(tables),
        "metadata": json.dumps(metadata, sort_keys=True),
    }
    if database.description:
        doc["description"] = database.description
    if database.archival_date is not None:
        doc["archival_date"] = _iso(database.archival_date)
    return doc


def row_field_name(column_index: int) -> str:
    return f"{ROW_COLUMN_FIELD_PREFIX}{column_index}"


def from_row(table: ViewerTable, row: ViewerRow) -> Document:
    doc: Document = {
        DOCUMENT_ID_FIELD: row.uuid,
        ROW_TABLE_ID_FIELD: table.uuid,
    }
    for index, value in sorted(row.cells.items()):
        if value is not None:
            doc[row_field_name(index)] = value
    return doc


def from_saved_search(search: SavedSearch) -> Document:
    doc: Document = {
        DOCUMENT_ID_FIELD: search.uuid,
        "name": search.name,
        "database_uuid": search.database_uuid,
        "table_uuid": search.table_uuid,
        "table_name": search.table_name,
        "search_info": search.search_info,
    }
    if search.description:
        doc["description"] = search.description
    if search.date_added is not None:
        doc["date_added"] = _iso(search.date_added)
    return doc


def saved_search_update(uuid: str, name: str, description: str | None) -> Document:
    """Atomic update touching only the name and description of a saved search."""
    return {
        DOCUMENT_ID_FIELD: uuid,
        "name": {"set": name},
        "description": {"set": description},
    }
