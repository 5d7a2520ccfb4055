"""dbindexer error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Indexing
- 4xxx: Backend
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Indexing (3xxx)
    INVALID_DOCUMENT = 3001
    PROVISION_FAILED = 3002
    FLUSH_TIMEOUT = 3003
    FLUSH_FAILED = 3004
    COMMIT_FAILED = 3005
    COMMIT_TIMEOUT = 3006
    OPTIMIZE_FAILED = 3007
    RESOURCE_RELEASE_FAILED = 3008
    INDEXING_CANCELLED = 3009
    PIPELINE_CLOSED = 3010
    DELETE_FAILED = 3011

    # Backend (4xxx)
    BACKEND_NOT_FOUND = 4001
    BACKEND_ALREADY_EXISTS = 4002
    BACKEND_REQUEST_FAILED = 4003
    BACKEND_UNREACHABLE = 4004


@dataclass(frozen=True, slots=True)
class DbIndexerError(Exception):
    """Base error with structured context for logs and CLI output."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'FLUSH_TIMEOUT')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(DbIndexerError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class BackendError(DbIndexerError):
    """Errors reported by a search backend client.

    The error code is the discriminator the pipeline classifies on:
    BACKEND_NOT_FOUND means the collection endpoint is not (yet) available
    and is the only transient case.
    """

    @property
    def is_not_found(self) -> bool:
        return self.code == ErrorCode.BACKEND_NOT_FOUND

    @property
    def is_already_exists(self) -> bool:
        return self.code == ErrorCode.BACKEND_ALREADY_EXISTS

    @property
    def is_unreachable(self) -> bool:
        return self.code == ErrorCode.BACKEND_UNREACHABLE

    @classmethod
    def not_found(cls, collection: str, reason: str = "") -> "BackendError":
        return cls(
            code=ErrorCode.BACKEND_NOT_FOUND,
            message=f"Collection {collection} not found" + (f": {reason}" if reason else ""),
            retryable=True,
            details={"collection": collection},
        )

    @classmethod
    def already_exists(cls, collection: str) -> "BackendError":
        return cls(
            code=ErrorCode.BACKEND_ALREADY_EXISTS,
            message=f"Collection already exists: {collection}",
            details={"collection": collection},
        )

    @classmethod
    def request_failed(
        cls, collection: str, reason: str, status_code: int | None = None
    ) -> "BackendError":
        return cls(
            code=ErrorCode.BACKEND_REQUEST_FAILED,
            message=f"Request to {collection} failed: {reason}",
            details={"collection": collection, "status_code": status_code, "reason": reason},
        )

    @classmethod
    def unreachable(cls, url: str, reason: str) -> "BackendError":
        return cls(
            code=ErrorCode.BACKEND_UNREACHABLE,
            message=f"Backend at {url} unreachable: {reason}",
            details={"url": url, "reason": reason},
        )


class IndexingError(DbIndexerError):
    """Errors raised by the indexing pipeline and the IndexManager facade."""


class InvalidDocumentError(IndexingError):
    """A document without a usable identity field was enqueued."""

    @classmethod
    def null_document(cls, collection: str) -> "InvalidDocumentError":
        return cls(
            code=ErrorCode.INVALID_DOCUMENT,
            message=f"Attempted to insert null document into collection {collection}",
            details={"collection": collection},
        )

    @classmethod
    def missing_id(cls, collection: str, id_field: str) -> "InvalidDocumentError":
        return cls(
            code=ErrorCode.INVALID_DOCUMENT,
            message=f"Document for collection {collection} has an empty '{id_field}' field",
            details={"collection": collection, "id_field": id_field},
        )


class ProvisionError(IndexingError):
    """Collection creation failed for a reason other than already-exists."""

    @classmethod
    def create_failed(cls, collection: str, cause: BackendError) -> "ProvisionError":
        return cls(
            code=ErrorCode.PROVISION_FAILED,
            message=f"Error creating collection {collection}: {cause.message}",
            details={"collection": collection, "cause": cause.error_name},
        )


class FlushError(IndexingError):
    """Buffered documents could not be written to the backend."""

    @property
    def pending_collections(self) -> list[str]:
        return list(self.details.get("collections", []))

    @classmethod
    def timeout(cls, collections: Iterable[str], attempts: int, elapsed: float) -> "FlushError":
        names = sorted(collections)
        return cls(
            code=ErrorCode.FLUSH_TIMEOUT,
            message=(
                f"Could not insert document batch in collection(s) {', '.join(names)}. "
                f"Timeout reached while waiting for collection to be available, "
                f"ran {attempts} attempts in {elapsed:.1f}s."
            ),
            retryable=True,
            details={"collections": names, "attempts": attempts, "elapsed_sec": elapsed},
        )

    @classmethod
    def failed(cls, collection: str, cause: BackendError) -> "FlushError":
        return cls(
            code=ErrorCode.FLUSH_FAILED,
            message=f"Problem adding documents to collection {collection}: {cause.message}",
            details={"collections": [collection], "cause": cause.error_name},
        )


class CommitError(IndexingError):
    """Commit or optimize of a collection failed."""

    @classmethod
    def failed(cls, collection: str, reason: str, attempts: int = 0) -> "CommitError":
        return cls(
            code=ErrorCode.COMMIT_FAILED,
            message=f"Could not commit collection {collection} after {attempts} attempts: {reason}",
            details={"collection": collection, "attempts": attempts, "committed": False},
        )

    @classmethod
    def optimize_failed(cls, collection: str, reason: str, attempts: int = 0) -> "CommitError":
        return cls(
            code=ErrorCode.OPTIMIZE_FAILED,
            message=(
                f"Collection {collection} was committed but could not be optimized "
                f"after {attempts} attempts: {reason}"
            ),
            details={"collection": collection, "attempts": attempts, "committed": True},
        )

    @classmethod
    def delete_failed(
        cls, collection: str, document_id: str, reason: str, attempts: int = 0
    ) -> "CommitError":
        return cls(
            code=ErrorCode.DELETE_FAILED,
            message=(
                f"Could not delete document {document_id} from collection {collection} "
                f"after {attempts} attempts: {reason}"
            ),
            details={
                "collection": collection,
                "document_id": document_id,
                "attempts": attempts,
                "committed": False,
            },
        )

    @classmethod
    def timeout(
        cls, collection: str, attempts: int, *, action: str = "commit", committed: bool = False
    ) -> "CommitError":
        return cls(
            code=ErrorCode.COMMIT_TIMEOUT,
            message=(
                f"Failed to {action} collection {collection}. Reason: Timeout reached while "
                f"waiting for collection to be available, ran {attempts} attempts."
            ),
            retryable=True,
            details={"collection": collection, "attempts": attempts, "committed": committed},
        )


class ResourceReleaseError(IndexingError):
    """The backend connection could not be closed cleanly."""

    @classmethod
    def close_failed(cls, reason: str) -> "ResourceReleaseError":
        return cls(
            code=ErrorCode.RESOURCE_RELEASE_FAILED,
            message=f"Error closing backend connection: {reason}",
            details={"reason": reason},
        )


class IndexingCancelledError(IndexingError):
    """A retry loop was cancelled through its cancel event."""

    @classmethod
    def during(cls, operation: str, attempts: int) -> "IndexingCancelledError":
        return cls(
            code=ErrorCode.INDEXING_CANCELLED,
            message=f"{operation} cancelled after {attempts} attempts",
            details={"operation": operation, "attempts": attempts},
        )


class PipelineClosedError(IndexingError):
    """The pipeline was used after its resources were released."""

    @classmethod
    def closed(cls, operation: str) -> "PipelineClosedError":
        return cls(
            code=ErrorCode.PIPELINE_CLOSED,
            message=f"Cannot {operation}: resources were already released",
            details={"operation": operation},
        )
