"""Tests for the in-memory backend."""

from __future__ import annotations

import pytest

from dbindexer.backend.memory import InMemoryBackend
from dbindexer.core.errors import BackendError


class TestVisibility:
    def test_unknown_collection_is_not_found(self, backend: InMemoryBackend) -> None:
        with pytest.raises(BackendError) as exc_info:
            backend.add_documents("missing", [{"id": "1"}])
        assert exc_info.value.is_not_found

    def test_new_collection_hidden_for_propagation_requests(self) -> None:
        backend = InMemoryBackend(propagation_requests=2)
        backend.create_collection("t1", "dbv-table")

        for _ in range(2):
            with pytest.raises(BackendError) as exc_info:
                backend.add_documents("t1", [{"id": "1"}])
            assert exc_info.value.is_not_found

        assert backend.add_documents("t1", [{"id": "1"}]) == 0

    def test_duplicate_create_already_exists(self, backend: InMemoryBackend) -> None:
        backend.create_collection("t1", "dbv-table")
        with pytest.raises(BackendError) as exc_info:
            backend.create_collection("t1", "dbv-table")
        assert exc_info.value.is_already_exists


class TestDocuments:
    def test_documents_visible_only_after_commit(self, backend: InMemoryBackend) -> None:
        backend.create_collection("t1", "dbv-table")
        backend.add_documents("t1", [{"id": "1", "col0": "a"}])

        assert backend.documents("t1") == []
        assert backend.staged_documents("t1") == [{"id": "1", "col0": "a"}]

        backend.commit("t1")
        assert backend.documents("t1") == [{"id": "1", "col0": "a"}]
        assert backend.staged_documents("t1") == []

    def test_last_write_per_id_wins(self, backend: InMemoryBackend) -> None:
        backend.create_collection("t1", "dbv-table")
        backend.add_documents("t1", [{"id": "1", "v": "old"}, {"id": "1", "v": "new"}])
        backend.commit("t1")
        assert backend.documents("t1") == [{"id": "1", "v": "new"}]

    def test_atomic_update_merges(self, backend: InMemoryBackend) -> None:
        backend.create_collection("s", "dbv-search")
        backend.add_documents("s", [{"id": "1", "name": "a", "table_uuid": "t"}])
        backend.commit("s")
        backend.add_documents("s", [{"id": "1", "name": {"set": "b"}}])
        backend.commit("s")
        assert backend.documents("s") == [{"id": "1", "name": "b", "table_uuid": "t"}]

    def test_atomic_update_after_uncommitted_delete_starts_empty(
        self, backend: InMemoryBackend
    ) -> None:
        backend.create_collection("s", "dbv-search")
        backend.add_documents("s", [{"id": "x", "extra": "keep"}])
        backend.commit("s")
        backend.delete_by_id("s", "x")
        backend.add_documents("s", [{"id": "x", "name": {"set": "new"}}])
        backend.commit("s")
        assert backend.documents("s") == [{"id": "x", "name": "new"}]

    def test_delete_by_id(self, backend: InMemoryBackend) -> None:
        backend.create_collection("s", "dbv-search")
        backend.add_documents("s", [{"id": "1"}, {"id": "2"}])
        backend.commit("s")
        backend.delete_by_id("s", "1")
        backend.commit("s")
        assert backend.documents("s") == [{"id": "2"}]

    def test_optimize_counts(self, backend: InMemoryBackend) -> None:
        backend.create_collection("t1", "dbv-table")
        backend.optimize("t1")
        assert backend.optimize_count("t1") == 1


class TestHooks:
    def test_fail_next_raises_then_recovers(self, backend: InMemoryBackend) -> None:
        backend.create_collection("t1", "dbv-table")
        backend.fail_next("commit", "t1", BackendError.request_failed("t1", "boom"), times=2)

        for _ in range(2):
            with pytest.raises(BackendError):
                backend.commit("t1")
        assert backend.commit("t1") == 0

    def test_fail_next_status(self, backend: InMemoryBackend) -> None:
        backend.create_collection("t1", "dbv-table")
        backend.fail_next("add", "t1", 500)
        assert backend.add_documents("t1", [{"id": "1"}]) == 500
        assert backend.staged_documents("t1") == []

    def test_calls_are_recorded(self, backend: InMemoryBackend) -> None:
        backend.create_collection("t1", "dbv-table")
        backend.add_documents("t1", [{"id": "1"}, {"id": "2"}])
        assert [c.operation for c in backend.calls] == ["create", "add"]
        assert backend.calls_for("add", "t1")[0].size == 2

    def test_closed_backend_unreachable(self, backend: InMemoryBackend) -> None:
        backend.close()
        with pytest.raises(BackendError) as exc_info:
            backend.commit("t1")
        assert exc_info.value.is_unreachable
