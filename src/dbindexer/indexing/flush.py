"""Draining buffered documents into collections that may not exist yet.

A collection that was just created is not immediately writable: the create
request returns before the collection is visible cluster-wide. Instead of
polling for readiness, the engine uses the write itself as the signal.

Each pass writes every non-empty collection once, so a collection that is
still propagating cannot starve the ones that are ready. A pass repeats
every backoff interval until nothing is pending, or until the retry window
expires. Any successful write anywhere resets the window.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

import structlog

from dbindexer.backend.base import SearchBackend
from dbindexer.config.constants import STATUS_OK
from dbindexer.core.errors import BackendError, FlushError
from dbindexer.indexing.buffer import DocumentBuffer
from dbindexer.indexing.retry import RetryPolicy

logger = structlog.get_logger()


class DirtySet:
    """Collections written to since their last commit.

    Grows on successful writes (FlushEngine), shrinks on successful commits
    (CommitCoordinator).
    """

    def __init__(self) -> None:
        self._names: set[str] = set()

    def add(self, collection: str) -> None:
        self._names.add(collection)

    def discard(self, collection: str) -> None:
        self._names.discard(collection)

    def clear(self) -> None:
        self._names.clear()

    def snapshot(self) -> frozenset[str]:
        return frozenset(self._names)

    def __contains__(self, collection: object) -> bool:
        return collection in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._names))


@dataclass
class FlushStats:
    """Outcome of one successful drain."""

    documents_written: int = 0
    collections_written: set[str] = field(default_factory=set)
    attempts: int = 0


class FlushEngine:
    """
    Writes everything in a DocumentBuffer to the backend.

    Outcome of one bulk write per collection:
    - status 0: sequence cleared, collection marked dirty, window reset
    - BACKEND_NOT_FOUND: collection not visible yet, keep and retry
    - other backend error or non-zero status: logged, keep and retry,
      window not reset
    - BACKEND_UNREACHABLE: the connection is gone, FlushError.failed

    Partial progress is kept when the drain times out: collections that
    were written are cleared even though FlushError.timeout is raised for
    the others, whose documents stay buffered.
    """

    def __init__(
        self,
        backend: SearchBackend,
        buffer: DocumentBuffer,
        dirty: DirtySet,
        policy: RetryPolicy | None = None,
    ):
        self._backend = backend
        self._buffer = buffer
        self._dirty = dirty
        self.policy = policy or RetryPolicy()

    def drain(self) -> FlushStats:
        """Write every buffered document.

        Returns:
            FlushStats of what was written.

        Raises:
            FlushError: FLUSH_TIMEOUT if collections stayed unwritable past
                the deadline, FLUSH_FAILED if the backend is unreachable.
            IndexingCancelledError: If the retry policy's cancel event fired.
        """
        stats = FlushStats()
        if not self._buffer.has_pending():
            self._buffer.remove_empty()
            return stats

        window = self.policy.open_window("flush")
        while True:
            for collection, docs in self._buffer.pending().items():
                if self._write(collection, docs, window.attempts):
                    self._buffer.clear(collection)
                    self._dirty.add(collection)
                    stats.documents_written += len(docs)
                    stats.collections_written.add(collection)
                    window.reset()

            if not self._buffer.has_pending():
                break

            window.pause()
            if window.expired:
                pending = list(self._buffer.pending())
                logger.error(
                    "flush_timeout",
                    collections=pending,
                    attempts=window.attempts,
                    elapsed_sec=round(window.elapsed, 3),
                )
                raise FlushError.timeout(pending, window.attempts, window.elapsed)

        self._buffer.remove_empty()
        stats.attempts = window.attempts + 1
        logger.debug(
            "flush_complete",
            documents=stats.documents_written,
            collections=len(stats.collections_written),
            attempts=stats.attempts,
        )
        return stats

    def _write(self, collection: str, docs: tuple[dict, ...], attempt: int) -> bool:
        """One bulk write. Returns True when the batch was accepted."""
        try:
            status = self._backend.add_documents(collection, docs)
        except BackendError as e:
            if e.is_not_found:
                logger.debug(
                    "collection_not_available_yet", collection=collection, attempt=attempt
                )
            elif e.is_unreachable:
                raise FlushError.failed(collection, e) from e
            else:
                logger.warning(
                    "batch_insert_failed",
                    collection=collection,
                    documents=len(docs),
                    error=str(e),
                )
            return False

        if status != STATUS_OK:
            logger.warning(
                "batch_insert_rejected",
                collection=collection,
                documents=len(docs),
                status=status,
            )
            return False
        return True
