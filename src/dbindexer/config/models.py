"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (DBINDEXER__SECTION__KEY)
3. Explicit YAML file (dbx --config PATH)
4. Global YAML (~/.config/dbindexer/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    DBINDEXER__<SECTION>__<KEY>=<VALUE>

Examples:
    DBINDEXER__LOGGING__LEVEL=DEBUG
    DBINDEXER__BACKEND__URL=http://solr:8983/solr
    DBINDEXER__BUFFER__MAX_DOCUMENTS_PER_COLLECTION=500
    DBINDEXER__RETRY__TIMEOUT_SEC=120
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        DBINDEXER__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every retry attempt.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class BackendConfig(BaseModel):
    """Search backend connection.

    Env vars:
        DBINDEXER__BACKEND__URL: Base URL of the Solr server (up to /solr)
        DBINDEXER__BACKEND__CONNECT_TIMEOUT_SEC: TCP connect timeout
        DBINDEXER__BACKEND__REQUEST_TIMEOUT_SEC: Per-request read timeout
    """

    url: str = Field(
        default="http://localhost:8983/solr",
        description="Base URL of the Solr server. The server must run in cloud mode.",
    )
    connect_timeout_sec: float = Field(
        default=5.0,
        description="Connection timeout for backend requests.",
    )
    request_timeout_sec: float = Field(
        default=60.0,
        description="Read timeout for backend requests. Optimize on large "
        "collections can take a while.",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Backend URL must be http(s): {v}")
        return v.rstrip("/")


class BufferConfig(BaseModel):
    """Document buffer spill thresholds.

    Env vars:
        DBINDEXER__BUFFER__MAX_DOCUMENTS_PER_COLLECTION: Flush when one collection holds this many
        DBINDEXER__BUFFER__MAX_COLLECTIONS: Flush when this many collections are tracked
    """

    max_documents_per_collection: int = Field(
        default=10,
        ge=1,
        description="Buffered documents per collection before a flush is forced. "
        "TRADEOFF: Higher values mean fewer requests but more memory.",
    )
    max_collections: int = Field(
        default=10,
        ge=1,
        description="Tracked collections before a flush is forced.",
    )


class RetryConfig(BaseModel):
    """Bounded retry while collections are not yet available.

    Env vars:
        DBINDEXER__RETRY__BACKOFF_SEC: Pause between attempts
        DBINDEXER__RETRY__TIMEOUT_SEC: Give up after this long without progress
    """

    backoff_sec: float = Field(
        default=1.0,
        gt=0,
        description="Pause between attempts against a collection that is not available yet.",
    )
    timeout_sec: float = Field(
        default=60.0,
        gt=0,
        description="Deadline measured from the last successful write. "
        "RISK: Too low fails ingestion while the cluster is still creating collections.",
    )


class CollectionsConfig(BaseModel):
    """Collection names and config templates.

    Env vars:
        DBINDEXER__COLLECTIONS__DATABASE_COLLECTION: Fixed collection for databases
        DBINDEXER__COLLECTIONS__SEARCHES_COLLECTION: Fixed collection for saved searches
        DBINDEXER__COLLECTIONS__TABLE_COLLECTION_PREFIX: Prefix of per-table collections
        DBINDEXER__COLLECTIONS__NUM_SHARDS: Shards for new collections
    """

    database_collection: str = "dbv-databases"
    searches_collection: str = "dbv-searches"
    table_collection_prefix: str = "dbv-table-"
    database_configset: str = "dbv-database"
    searches_configset: str = "dbv-search"
    table_configset: str = "dbv-table"
    num_shards: int = Field(default=1, ge=1)


class DbIndexerConfig(BaseModel):
    """Root configuration for dbindexer.

    All settings can be configured via:
    1. Environment variables: DBINDEXER__SECTION__KEY
    2. YAML config files (explicit or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    buffer: BufferConfig = Field(default_factory=BufferConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    collections: CollectionsConfig = Field(default_factory=CollectionsConfig)
