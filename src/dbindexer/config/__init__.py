"""Config module exports."""

from dbindexer.config.loader import load_config
from dbindexer.config.models import (
    BackendConfig,
    BufferConfig,
    CollectionsConfig,
    DbIndexerConfig,
    LoggingConfig,
    LogOutputConfig,
    RetryConfig,
)

__all__ = [
    "load_config",
    "BackendConfig",
    "BufferConfig",
    "CollectionsConfig",
    "DbIndexerConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "RetryConfig",
]
