"""dbindexer - batched indexing of preserved databases into a Solr-style search index."""

from dbindexer.config import DbIndexerConfig, load_config
from dbindexer.core.errors import DbIndexerError, IndexingError
from dbindexer.indexing import IndexingPipeline, IndexManager

__version__ = "0.1.0"

__all__ = [
    "DbIndexerConfig",
    "DbIndexerError",
    "IndexManager",
    "IndexingError",
    "IndexingPipeline",
    "__version__",
    "load_config",
]
