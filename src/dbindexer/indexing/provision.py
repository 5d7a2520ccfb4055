"""Idempotent collection provisioning."""

from __future__ import annotations

import structlog

from dbindexer.backend.base import SearchBackend
from dbindexer.core.errors import BackendError, ProvisionError

logger = structlog.get_logger()


class CollectionProvisioner:
    """
    Ensures collections exist, treating "already exists" as success.

    Other pipeline instances may create the same fixed collection
    concurrently, so a duplicate CREATE is expected and harmless. Any other
    failure is raised as ProvisionError and never retried here: whether it
    is fatal is the caller's decision.

    Names that were ensured once are remembered and not requested again.
    """

    def __init__(self, backend: SearchBackend, num_shards: int = 1):
        self._backend = backend
        self.num_shards = num_shards
        self._ensured: set[str] = set()

    def ensure(self, collection: str, config_template: str) -> None:
        """Create ``collection`` from ``config_template`` unless it already exists.

        Raises:
            ProvisionError: If the backend rejected the request for any
                reason other than the collection already existing.
        """
        if collection in self._ensured:
            return

        logger.info(
            "creating_collection",
            collection=collection,
            config=config_template,
            num_shards=self.num_shards,
        )
        try:
            self._backend.create_collection(collection, config_template, self.num_shards)
        except BackendError as e:
            if not e.is_already_exists:
                raise ProvisionError.create_failed(collection, e) from e
            logger.info("collection_already_exists", collection=collection)

        self._ensured.add(collection)

    def is_ensured(self, collection: str) -> bool:
        return collection in self._ensured

    def forget(self, collection: str) -> None:
        """Request the collection again on the next ensure()."""
        self._ensured.discard(collection)
