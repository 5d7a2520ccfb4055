"""Search backend protocol."""

from collections.abc import Sequence
from typing import Any, Protocol

Document = dict[str, Any]


class SearchBackend(Protocol):
    """Protocol for document-oriented search backends.

    Write calls return the backend status (0 on success). Failures are
    raised as BackendError; the error code separates "collection not
    found" (the collection was created but is not visible yet) from
    every other failure.
    """

    def create_collection(self, name: str, config_name: str, num_shards: int = 1) -> None:
        """Create a collection from a config template.

        Raises:
            BackendError: BACKEND_ALREADY_EXISTS if the collection exists,
                another code on any other failure.
        """
        ...

    def add_documents(self, collection: str, documents: Sequence[Document]) -> int:
        """Bulk-add documents to a collection."""
        ...

    def delete_by_id(self, collection: str, document_id: str) -> int:
        """Delete one document by its unique key."""
        ...

    def commit(self, collection: str, *, soft_commit: bool = False) -> int:
        """Make written documents visible to queries."""
        ...

    def optimize(self, collection: str) -> int:
        """Merge index segments of a committed collection."""
        ...

    def close(self) -> None:
        """Release the connection. Called exactly once by the pipeline."""
        ...
