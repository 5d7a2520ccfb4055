"""Per-collection buffer of documents waiting to be written."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

import structlog

from dbindexer.backend.base import Document
from dbindexer.indexing.documents import validate_document

logger = structlog.get_logger()


class DocumentBuffer:
    """
    Pending documents grouped by destination collection.

    Two spill thresholds decide when the caller must flush: the length of
    one collection's sequence, and the number of tracked collections.
    Insertion order is kept per collection; duplicate ids are not merged
    (the backend keeps the last write per id).

    Mutated only through enqueue (producer side) and clear/remove_empty
    (flush side). Readers get immutable snapshots.
    """

    def __init__(self, max_documents_per_collection: int = 10, max_collections: int = 10):
        if max_documents_per_collection < 1 or max_collections < 1:
            raise ValueError("buffer thresholds must be >= 1")
        self.max_documents_per_collection = max_documents_per_collection
        self.max_collections = max_collections
        self._docs: dict[str, list[Document]] = {}

    def enqueue(self, collection: str, document: Document | None) -> bool:
        """Buffer a document. Returns True when a flush is required.

        Raises:
            InvalidDocumentError: If the document is null or has no id.
                The buffer is left unchanged.
        """
        doc = dict(validate_document(document, collection))
        docs = self._docs.setdefault(collection, [])
        docs.append(doc)
        return len(docs) >= self.max_documents_per_collection or (
            len(self._docs) >= self.max_collections
        )

    def snapshot(self) -> Mapping[str, tuple[Document, ...]]:
        """Read-only view of every tracked collection, empty ones included."""
        return MappingProxyType({name: tuple(docs) for name, docs in self._docs.items()})

    def pending(self) -> Mapping[str, tuple[Document, ...]]:
        """Read-only view of the collections that still hold documents."""
        return MappingProxyType({name: tuple(docs) for name, docs in self._docs.items() if docs})

    def pending_for(self, collection: str) -> int:
        return len(self._docs.get(collection, ()))

    def has_pending(self) -> bool:
        return any(self._docs.values())

    def pending_count(self) -> int:
        return sum(len(docs) for docs in self._docs.values())

    def clear(self, collection: str) -> None:
        """Empty one collection's sequence; the collection stays tracked."""
        if collection in self._docs:
            self._docs[collection].clear()

    def remove_empty(self) -> None:
        """Stop tracking collections whose sequence is empty."""
        self._docs = {name: docs for name, docs in self._docs.items() if docs}

    def discard_all(self) -> int:
        """Drop every buffered document. Returns how many were dropped."""
        dropped = self.pending_count()
        self._docs.clear()
        if dropped:
            logger.warning("buffered_documents_discarded", count=dropped)
        return dropped

    def __len__(self) -> int:
        return len(self._docs)

    def __contains__(self, collection: object) -> bool:
        return collection in self._docs
