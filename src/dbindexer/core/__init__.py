"""Core module exports."""

from dbindexer.core.errors import (
    BackendError,
    CommitError,
    ConfigError,
    DbIndexerError,
    ErrorCode,
    FlushError,
    IndexingCancelledError,
    IndexingError,
    InvalidDocumentError,
    PipelineClosedError,
    ProvisionError,
    ResourceReleaseError,
)
from dbindexer.core.logging import (
    clear_ingest_id,
    configure_logging,
    get_ingest_id,
    get_logger,
    set_ingest_id,
)

__all__ = [
    # Errors
    "BackendError",
    "CommitError",
    "ConfigError",
    "DbIndexerError",
    "ErrorCode",
    "FlushError",
    "IndexingCancelledError",
    "IndexingError",
    "InvalidDocumentError",
    "PipelineClosedError",
    "ProvisionError",
    "ResourceReleaseError",
    # Logging
    "clear_ingest_id",
    "configure_logging",
    "get_ingest_id",
    "get_logger",
    "set_ingest_id",
]
