"""Committing and optimizing dirty collections."""

from __future__ import annotations

import structlog

from dbindexer.backend.base import SearchBackend
from dbindexer.config.constants import STATUS_OK
from dbindexer.core.errors import BackendError, CommitError
from dbindexer.indexing.flush import DirtySet, FlushEngine
from dbindexer.indexing.retry import RetryPolicy

logger = structlog.get_logger()


class CommitCoordinator:
    """
    Commits (and optionally optimizes) collections one at a time.

    Uses the same bounded retry as FlushEngine: BACKEND_NOT_FOUND means the
    collection is not visible yet and is retried every backoff interval
    until the window expires. Everything else is fatal for the collection,
    and commit_all stops at the first fatal error without attempting the
    remaining collections.

    An optimize failure after a successful commit is still a CommitError
    (OPTIMIZE_FAILED, details["committed"] is True): the data is committed
    but not optimized, and the collection stays dirty.
    """

    def __init__(
        self,
        backend: SearchBackend,
        flush: FlushEngine,
        dirty: DirtySet,
        policy: RetryPolicy | None = None,
    ):
        self._backend = backend
        self._flush = flush
        self._dirty = dirty
        self.policy = policy or RetryPolicy()

    def commit_all(self, *, optimize: bool = True) -> list[str]:
        """Commit every dirty collection.

        Pending documents are flushed first so that every collection that
        receives them is part of the commit.

        Returns:
            Names of the collections committed, in commit order.

        Raises:
            FlushError: If pending documents could not be flushed.
            CommitError: On the first collection that fails.
        """
        self._flush.drain()
        committed: list[str] = []
        for collection in list(self._dirty):
            self.commit(collection, optimize=optimize)
            committed.append(collection)
        if committed:
            logger.info("collections_committed", collections=committed, optimize=optimize)
        return committed

    def commit(self, collection: str, *, optimize: bool = False, soft_commit: bool = False) -> None:
        """Flush pending documents, then commit and optionally optimize ``collection``.

        Raises:
            FlushError: If pending documents could not be flushed.
            CommitError: COMMIT_FAILED, OPTIMIZE_FAILED or COMMIT_TIMEOUT.
        """
        self._flush.drain()

        window = self.policy.open_window("commit")
        committed = False
        while True:
            try:
                if not committed:
                    self._commit_step(collection, soft_commit, window.attempts + 1)
                    committed = True
                    window.reset()
                if optimize:
                    self._optimize_step(collection, window.attempts + 1)
                break
            except BackendError as e:
                if not e.is_not_found:
                    attempts = window.attempts + 1
                    if committed:
                        raise CommitError.optimize_failed(collection, e.message, attempts) from e
                    raise CommitError.failed(collection, e.message, attempts) from e
                logger.debug(
                    "collection_not_available_yet",
                    collection=collection,
                    step="optimize" if committed else "commit",
                    attempt=window.attempts,
                )

            window.pause()
            if window.expired:
                logger.error(
                    "commit_timeout",
                    collection=collection,
                    attempts=window.attempts,
                    committed=committed,
                )
                raise CommitError.timeout(
                    collection,
                    window.attempts,
                    action="commit and optimize" if optimize else "commit",
                    committed=committed,
                )

        self._dirty.discard(collection)
        logger.debug("collection_committed", collection=collection, optimized=optimize)

    def delete(self, collection: str, document_id: str) -> None:
        """Flush pending documents, then delete one document by id.

        The deletion is written but not committed; callers commit afterwards.

        Raises:
            FlushError: If pending documents could not be flushed.
            CommitError: DELETE_FAILED or COMMIT_TIMEOUT.
        """
        self._flush.drain()

        window = self.policy.open_window("delete")
        while True:
            try:
                status = self._backend.delete_by_id(collection, document_id)
            except BackendError as e:
                if not e.is_not_found:
                    raise CommitError.delete_failed(
                        collection, document_id, e.message, window.attempts + 1
                    ) from e
                logger.debug(
                    "collection_not_available_yet",
                    collection=collection,
                    step="delete",
                    attempt=window.attempts,
                )
            else:
                if status != STATUS_OK:
                    raise CommitError.delete_failed(
                        collection, document_id, f"status {status}", window.attempts + 1
                    )
                break

            window.pause()
            if window.expired:
                raise CommitError.timeout(
                    collection, window.attempts, action=f"delete document {document_id} from"
                )

        self._dirty.add(collection)
        logger.info("document_deleted", collection=collection, document_id=document_id)

    def _commit_step(self, collection: str, soft_commit: bool, attempt: int) -> None:
        status = self._backend.commit(collection, soft_commit=soft_commit)
        if status != STATUS_OK:
            raise CommitError.failed(collection, f"status {status}", attempt)

    def _optimize_step(self, collection: str, attempt: int) -> None:
        status = self._backend.optimize(collection)
        if status != STATUS_OK:
            raise CommitError.optimize_failed(collection, f"status {status}", attempt)
