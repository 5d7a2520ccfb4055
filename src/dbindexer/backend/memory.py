"""In-process search backend with simulated eventual consistency.

A collection created here only becomes visible after a configurable number
of requests have been made against it, which reproduces what a SolrCloud
cluster does while a new collection propagates. Documents are staged until
committed, atomic ``{"set": value}`` updates are applied on write, and every
call is recorded for inspection.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from dbindexer.backend.base import Document
from dbindexer.config.constants import DOCUMENT_ID_FIELD, STATUS_OK
from dbindexer.core.errors import BackendError

logger = structlog.get_logger()


@dataclass
class _Collection:
    config_name: str
    num_shards: int
    hidden_requests: int
    committed: dict[str, Document] = field(default_factory=dict)
    staged: dict[str, Document | None] = field(default_factory=dict)
    optimized: int = 0


@dataclass(frozen=True)
class BackendCall:
    """One recorded backend call."""

    operation: str
    collection: str
    size: int = 0


def _apply_update(existing: Document | None, document: Document) -> Document:
    """Apply a document, honouring atomic ``{"set": value}`` field updates."""
    atomic = any(isinstance(v, dict) and "set" in v for v in document.values())
    if not atomic:
        return dict(document)
    merged = dict(existing or {})
    for key, value in document.items():
        merged[key] = value["set"] if isinstance(value, dict) and "set" in value else value
    return merged


class InMemoryBackend:
    """
    SearchBackend kept entirely in memory.

    Usage::

        backend = InMemoryBackend(propagation_requests=2)
        backend.create_collection("t1", "dbv-table")
        backend.add_documents("t1", docs)  # BACKEND_NOT_FOUND (1st request)
        backend.add_documents("t1", docs)  # BACKEND_NOT_FOUND (2nd request)
        backend.add_documents("t1", docs)  # 0
        backend.commit("t1")
        backend.documents("t1")
    """

    def __init__(self, propagation_requests: int = 0) -> None:
        """
        Initialize the backend.

        Args:
            propagation_requests: Requests a new collection answers with
                "not found" before it becomes visible
        """
        self.propagation_requests = propagation_requests
        self.calls: list[BackendCall] = []
        self.closed = False
        self._collections: dict[str, _Collection] = {}
        self._failures: dict[tuple[str, str], deque[BackendError | int]] = {}

    # -------------------------------------------------------------------------
    # Test hooks
    # -------------------------------------------------------------------------

    def fail_next(
        self, operation: str, collection: str, outcome: BackendError | int, times: int = 1
    ) -> None:
        """Make the next ``times`` calls of ``operation`` on ``collection`` fail.

        ``outcome`` is either a BackendError to raise or a non-zero status
        to return.
        """
        queue = self._failures.setdefault((operation, collection), deque())
        queue.extend([outcome] * times)

    def documents(self, collection: str) -> list[Document]:
        """Committed (query-visible) documents of a collection."""
        return list(self._collections[collection].committed.values())

    def staged_documents(self, collection: str) -> list[Document]:
        """Written but uncommitted documents of a collection."""
        return [d for d in self._collections[collection].staged.values() if d is not None]

    def collection_names(self) -> list[str]:
        return sorted(self._collections)

    def optimize_count(self, collection: str) -> int:
        return self._collections[collection].optimized

    def calls_for(self, operation: str, collection: str | None = None) -> list[BackendCall]:
        return [
            c
            for c in self.calls
            if c.operation == operation and (collection is None or c.collection == collection)
        ]

    # -------------------------------------------------------------------------
    # SearchBackend
    # -------------------------------------------------------------------------

    def _enter(self, operation: str, collection: str, size: int = 0) -> int | None:
        if self.closed:
            raise BackendError.unreachable("memory://", "backend closed")
        self.calls.append(BackendCall(operation, collection, size))
        queue = self._failures.get((operation, collection))
        if queue:
            outcome = queue.popleft()
            if isinstance(outcome, BackendError):
                raise outcome
            return outcome
        return None

    def _visible(self, collection: str) -> _Collection:
        coll = self._collections.get(collection)
        if coll is None:
            raise BackendError.not_found(collection)
        if coll.hidden_requests > 0:
            coll.hidden_requests -= 1
            raise BackendError.not_found(collection, "collection is still propagating")
        return coll

    def create_collection(self, name: str, config_name: str, num_shards: int = 1) -> None:
        self._enter("create", name)
        if name in self._collections:
            raise BackendError.already_exists(name)
        self._collections[name] = _Collection(
            config_name=config_name,
            num_shards=num_shards,
            hidden_requests=self.propagation_requests,
        )
        logger.debug("memory_collection_created", collection=name, config=config_name)

    def add_documents(self, collection: str, documents: Sequence[Document]) -> int:
        status = self._enter("add", collection, len(documents))
        if status is not None:
            return status
        coll = self._visible(collection)
        for doc in documents:
            doc_id = str(doc[DOCUMENT_ID_FIELD])
            # A staged delete (None) hides the committed version
            existing = coll.staged[doc_id] if doc_id in coll.staged else coll.committed.get(doc_id)
            coll.staged[doc_id] = _apply_update(existing, doc)
        return STATUS_OK

    def delete_by_id(self, collection: str, document_id: str) -> int:
        status = self._enter("delete", collection)
        if status is not None:
            return status
        coll = self._visible(collection)
        coll.staged[document_id] = None
        return STATUS_OK

    def commit(self, collection: str, *, soft_commit: bool = False) -> int:  # noqa: ARG002
        status = self._enter("commit", collection)
        if status is not None:
            return status
        coll = self._visible(collection)
        for doc_id, doc in coll.staged.items():
            if doc is None:
                coll.committed.pop(doc_id, None)
            else:
                coll.committed[doc_id] = doc
        coll.staged.clear()
        return STATUS_OK

    def optimize(self, collection: str) -> int:
        status = self._enter("optimize", collection)
        if status is not None:
            return status
        self._visible(collection).optimized += 1
        return STATUS_OK

    def close(self) -> None:
        self.closed = True
