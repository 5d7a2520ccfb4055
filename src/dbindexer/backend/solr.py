"""Solr backend over HTTP via httpx.

Talks to a SolrCloud server:
- Collections API (``/admin/collections?action=CREATE``) for provisioning
- ``/<collection>/update`` with JSON bodies for adds, atomic updates,
  deletes, commits and optimizes

All classification of failures happens here. An HTTP 404 on a collection
endpoint means the collection is not (yet) visible on the node that
answered; that is the one transient condition the pipeline retries on.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx
import structlog

from dbindexer.backend.base import Document
from dbindexer.config.constants import ALREADY_EXISTS_MARKER, STATUS_OK
from dbindexer.config.models import BackendConfig
from dbindexer.core.errors import BackendError

logger = structlog.get_logger()


def _error_message(payload: dict[str, Any], fallback: str) -> str:
    """Best-effort extraction of Solr's error text."""
    for key in ("error", "exception"):
        detail = payload.get(key)
        if isinstance(detail, dict) and detail.get("msg"):
            return str(detail["msg"])
        if isinstance(detail, str) and detail:
            return detail
    failure = payload.get("failure")
    if failure:
        return str(failure)
    return fallback


def _status(payload: dict[str, Any]) -> int:
    header = payload.get("responseHeader") or {}
    return int(header.get("status", STATUS_OK))


class SolrBackend:
    """
    SearchBackend implementation for a SolrCloud server.

    Usage::

        backend = SolrBackend.from_config(config.backend)
        backend.create_collection("dbv-databases", "dbv-database")
        backend.add_documents("dbv-databases", [{"id": "db-1", "name": "sakila"}])
        backend.commit("dbv-databases")
        backend.close()
    """

    def __init__(
        self,
        url: str,
        *,
        connect_timeout_sec: float = 5.0,
        request_timeout_sec: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            url: Base URL up to and including ``/solr``
            connect_timeout_sec: TCP connect timeout
            request_timeout_sec: Read/write timeout per request
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.url = url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.url,
            timeout=httpx.Timeout(request_timeout_sec, connect=connect_timeout_sec),
            transport=transport,
        )

    @classmethod
    def from_config(
        cls, config: BackendConfig, transport: httpx.BaseTransport | None = None
    ) -> SolrBackend:
        return cls(
            config.url,
            connect_timeout_sec=config.connect_timeout_sec,
            request_timeout_sec=config.request_timeout_sec,
            transport=transport,
        )

    def _request(
        self,
        method: str,
        path: str,
        collection: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> dict[str, Any]:
        query = {"wt": "json", **(params or {})}
        try:
            response = self._client.request(method, path, params=query, json=json)
        except httpx.TransportError as e:
            raise BackendError.unreachable(self.url, str(e) or type(e).__name__) from e

        if response.status_code == 404:
            raise BackendError.not_found(collection, f"HTTP 404 on {path}")

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if response.is_error:
            message = _error_message(payload, response.text[:500] or response.reason_phrase)
            if ALREADY_EXISTS_MARKER in message:
                raise BackendError.already_exists(collection)
            raise BackendError.request_failed(collection, message, response.status_code)
        return payload

    def _update(
        self, collection: str, body: Any, params: dict[str, Any] | None = None
    ) -> int:
        payload = self._request("POST", f"/{collection}/update", collection, params=params, json=body)
        return _status(payload)

    def create_collection(self, name: str, config_name: str, num_shards: int = 1) -> None:
        payload = self._request(
            "GET",
            "/admin/collections",
            name,
            params={
                "action": "CREATE",
                "name": name,
                "numShards": num_shards,
                "collection.configName": config_name,
            },
        )
        # Older servers answer 200 and put the failure in the body
        if _status(payload) != STATUS_OK or "failure" in payload or "exception" in payload:
            message = _error_message(payload, f"status {_status(payload)}")
            if ALREADY_EXISTS_MARKER in message:
                raise BackendError.already_exists(name)
            raise BackendError.request_failed(name, message)

        qtime = (payload.get("responseHeader") or {}).get("QTime")
        logger.debug("create_collection_response", collection=name, response=payload)
        if qtime is not None:
            logger.info("collection_created", collection=name, qtime_ms=qtime)

    def add_documents(self, collection: str, documents: Sequence[Document]) -> int:
        return self._update(collection, list(documents))

    def delete_by_id(self, collection: str, document_id: str) -> int:
        return self._update(collection, {"delete": {"id": document_id}})

    def commit(self, collection: str, *, soft_commit: bool = False) -> int:
        params: dict[str, Any] = {"commit": "true", "waitSearcher": "true"}
        if soft_commit:
            params["softCommit"] = "true"
        return self._update(collection, [], params)

    def optimize(self, collection: str) -> int:
        return self._update(collection, [], {"optimize": "true", "waitSearcher": "true"})

    def close(self) -> None:
        self._client.close()
