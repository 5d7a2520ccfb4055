"""The indexing pipeline: one owner for buffer, dirty set and connection.

Single producer only. Nothing here takes a lock: callers feeding one
pipeline from several threads must serialize enqueue/flush/commit calls
themselves. Retry loops block the calling thread; the only early way out
is the retry policy's cancel event.
"""

from __future__ import annotations

from types import TracebackType

import structlog

from dbindexer.backend.base import Document, SearchBackend
from dbindexer.config.models import BufferConfig
from dbindexer.core.errors import PipelineClosedError, ResourceReleaseError
from dbindexer.indexing.buffer import DocumentBuffer
from dbindexer.indexing.commit import CommitCoordinator
from dbindexer.indexing.flush import DirtySet, FlushEngine, FlushStats
from dbindexer.indexing.retry import RetryPolicy

logger = structlog.get_logger()


class IndexingPipeline:
    """
    Buffered writes, bounded-retry flushes and commits against one backend.

    Usage::

        with IndexingPipeline(backend) as pipeline:
            pipeline.enqueue("dbv-databases", {"id": "db-1", "name": "sakila"})
            pipeline.commit_all()

    Documents still buffered when the pipeline is closed are discarded, not
    flushed: call commit_all() before close() to keep them.
    """

    def __init__(
        self,
        backend: SearchBackend,
        buffer_config: BufferConfig | None = None,
        policy: RetryPolicy | None = None,
    ):
        buffer_config = buffer_config or BufferConfig()
        self._backend = backend
        self._buffer = DocumentBuffer(
            max_documents_per_collection=buffer_config.max_documents_per_collection,
            max_collections=buffer_config.max_collections,
        )
        self._dirty = DirtySet()
        self.policy = policy or RetryPolicy()
        self._flush = FlushEngine(backend, self._buffer, self._dirty, self.policy)
        self._commit = CommitCoordinator(backend, self._flush, self._dirty, self.policy)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self, operation: str) -> None:
        if self._closed:
            raise PipelineClosedError.closed(operation)

    def enqueue(self, collection: str, document: Document) -> FlushStats | None:
        """Buffer a document and drain the buffer when a threshold is hit.

        Returns:
            FlushStats when the enqueue triggered a flush, else None.
        """
        self._check_open("enqueue")
        if self._buffer.enqueue(collection, document):
            return self._flush.drain()
        return None

    def flush(self) -> FlushStats:
        self._check_open("flush")
        return self._flush.drain()

    def commit(self, collection: str, *, optimize: bool = False, soft_commit: bool = False) -> None:
        self._check_open("commit")
        self._commit.commit(collection, optimize=optimize, soft_commit=soft_commit)

    def commit_all(self, *, optimize: bool = True) -> list[str]:
        self._check_open("commit")
        return self._commit.commit_all(optimize=optimize)

    def delete(self, collection: str, document_id: str) -> None:
        """Delete a document by id, retrying while the collection is not visible."""
        self._check_open("delete")
        self._commit.delete(collection, document_id)

    def pending_documents(self, collection: str | None = None) -> int:
        if collection is None:
            return self._buffer.pending_count()
        return self._buffer.pending_for(collection)

    def dirty_collections(self) -> frozenset[str]:
        return self._dirty.snapshot()

    def close(self) -> None:
        """Discard buffered documents and close the backend, once.

        Safe to call repeatedly and after failed flushes or commits.

        Raises:
            ResourceReleaseError: If closing the backend failed. The
                pipeline still counts as closed.
        """
        if self._closed:
            return
        self._closed = True
        dropped = self._buffer.discard_all()
        try:
            self._backend.close()
        except Exception as e:
            raise ResourceReleaseError.close_failed(str(e)) from e
        logger.info("pipeline_closed", discarded_documents=dropped)

    def __enter__(self) -> IndexingPipeline:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
