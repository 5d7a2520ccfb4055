"""Batched indexing and eventual-consistency commit pipeline.

Exports:
- IndexManager: Entity-level facade (databases, tables, rows, saved searches)
- IndexingPipeline: Owner of buffer, dirty set and backend connection
- DocumentBuffer, FlushEngine, CommitCoordinator, CollectionProvisioner
- RetryPolicy, RetryWindow: Deadline-bounded retry
"""

from dbindexer.indexing.buffer import DocumentBuffer
from dbindexer.indexing.commit import CommitCoordinator
from dbindexer.indexing.flush import DirtySet, FlushEngine, FlushStats
from dbindexer.indexing.manager import IndexManager, IngestStats
from dbindexer.indexing.pipeline import IndexingPipeline
from dbindexer.indexing.provision import CollectionProvisioner
from dbindexer.indexing.retry import RetryPolicy, RetryWindow

__all__ = [
    "CollectionProvisioner",
    "CommitCoordinator",
    "DirtySet",
    "DocumentBuffer",
    "FlushEngine",
    "FlushStats",
    "IndexManager",
    "IndexingPipeline",
    "IngestStats",
    "RetryPolicy",
    "RetryWindow",
]
