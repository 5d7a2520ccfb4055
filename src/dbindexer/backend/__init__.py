"""Search backend clients.

Exports:
- SearchBackend: Protocol every backend implements
- SolrBackend: SolrCloud over HTTP
- InMemoryBackend: In-process backend for dry runs and tests
- create_backend: Build the backend selected by configuration
"""

from dbindexer.backend.base import Document, SearchBackend
from dbindexer.backend.memory import BackendCall, InMemoryBackend
from dbindexer.backend.solr import SolrBackend
from dbindexer.config.models import BackendConfig


def create_backend(config: BackendConfig, *, dry_run: bool = False) -> SearchBackend:
    """Create the SolrBackend for ``config``, or an InMemoryBackend for dry runs."""
    if dry_run:
        return InMemoryBackend()
    return SolrBackend.from_config(config)


__all__ = [
    "BackendCall",
    "Document",
    "InMemoryBackend",
    "SearchBackend",
    "SolrBackend",
    "create_backend",
]
