"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
These are protocol constraints of the search backend.

For configurable values, see models.py (BufferConfig, RetryConfig, etc.).
"""

DOCUMENT_ID_FIELD = "id"
"""Unique key field of every collection schema."""

STATUS_OK = 0
"""responseHeader.status reported by the backend for a successful request."""

ALREADY_EXISTS_MARKER = "collection already exists"
"""Fragment of the Collections API error message for a duplicate CREATE."""

ROW_TABLE_ID_FIELD = "table_id"
"""Row field pointing back at the table uuid."""

ROW_COLUMN_FIELD_PREFIX = "col"
"""Row cell fields are named col<index>."""
