"""Tests for error types and codes."""

import pytest

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


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.CONFIG_INVALID_VALUE, 2000),
            (ErrorCode.INVALID_DOCUMENT, 3000),
            (ErrorCode.FLUSH_TIMEOUT, 3000),
            (ErrorCode.COMMIT_FAILED, 3000),
            (ErrorCode.BACKEND_NOT_FOUND, 4000),
            (ErrorCode.BACKEND_UNREACHABLE, 4000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        # Given
        error_code = code

        # When
        value = error_code.value

        # Then
        assert expected_range <= value < expected_range + 1000


class TestDbIndexerError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        """Error serializes to dict with all required fields."""
        # Given
        error = DbIndexerError(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message="Test message",
            retryable=True,
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 2001,
            "error": "CONFIG_PARSE_ERROR",
            "message": "Test message",
            "retryable": True,
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_human_readable(self) -> None:
        """Error string representation is human readable."""
        # Given
        error = DbIndexerError(
            code=ErrorCode.PIPELINE_CLOSED,
            message="Something broke",
        )

        # When
        result = str(error)

        # Then
        assert result == "[3010] PIPELINE_CLOSED: Something broke"

    def test_given_subclass_when_raised_then_caught_as_base(self) -> None:
        """Indexing errors can be caught through the shared bases."""
        with pytest.raises(IndexingError):
            raise ProvisionError.create_failed("c", BackendError.request_failed("c", "boom"))
        with pytest.raises(DbIndexerError):
            raise ConfigError.file_not_found("/x")


class TestConfigError:
    """ConfigError factory method tests."""

    def test_parse_error(self) -> None:
        error = ConfigError.parse_error("/etc/dbx.yaml", "bad indent")
        assert error.code == ErrorCode.CONFIG_PARSE_ERROR
        assert error.details == {"path": "/etc/dbx.yaml", "reason": "bad indent"}

    def test_invalid_value(self) -> None:
        error = ConfigError.invalid_value("retry.timeout_sec", -1, "must be > 0")
        assert error.code == ErrorCode.CONFIG_INVALID_VALUE
        assert "retry.timeout_sec" in error.message
        assert error.details["value"] == "-1"

    def test_file_not_found(self) -> None:
        assert ConfigError.file_not_found("/x").details == {"path": "/x"}
        assert ConfigError.file_not_found("/x").code == ErrorCode.CONFIG_FILE_NOT_FOUND


class TestBackendError:
    """Backend error classification."""

    def test_not_found_is_transient(self) -> None:
        error = BackendError.not_found("dbv-table-1")
        assert error.is_not_found
        assert error.retryable
        assert not error.is_already_exists

    def test_already_exists(self) -> None:
        error = BackendError.already_exists("dbv-databases")
        assert error.is_already_exists
        assert not error.is_not_found
        assert "collection already exists: dbv-databases" in error.message.lower()

    def test_request_failed_carries_status(self) -> None:
        error = BackendError.request_failed("t1", "bad field", status_code=400)
        assert error.details["status_code"] == 400
        assert not error.is_not_found
        assert not error.retryable

    def test_unreachable(self) -> None:
        error = BackendError.unreachable("http://solr", "connection refused")
        assert error.is_unreachable
        assert error.details["url"] == "http://solr"


class TestIndexingErrors:
    """Pipeline error factories name the collection and the attempt count."""

    def test_invalid_document(self) -> None:
        assert InvalidDocumentError.null_document("t1").code == ErrorCode.INVALID_DOCUMENT
        error = InvalidDocumentError.missing_id("t1", "id")
        assert error.details == {"collection": "t1", "id_field": "id"}

    def test_flush_timeout_names_collections_and_attempts(self) -> None:
        error = FlushError.timeout(["b", "a"], attempts=60, elapsed=60.0)
        assert error.code == ErrorCode.FLUSH_TIMEOUT
        assert error.pending_collections == ["a", "b"]
        assert error.details["attempts"] == 60
        assert "a, b" in error.message
        assert "60 attempts" in error.message

    def test_flush_failed(self) -> None:
        cause = BackendError.unreachable("http://solr", "refused")
        error = FlushError.failed("t1", cause)
        assert error.code == ErrorCode.FLUSH_FAILED
        assert error.details["cause"] == "BACKEND_UNREACHABLE"

    def test_commit_timeout_message(self) -> None:
        error = CommitError.timeout("t1", 60, action="commit and optimize")
        assert error.code == ErrorCode.COMMIT_TIMEOUT
        assert "commit and optimize collection t1" in error.message
        assert "ran 60 attempts" in error.message

    def test_optimize_failed_reports_committed(self) -> None:
        error = CommitError.optimize_failed("t1", "disk full", attempts=2)
        assert error.details["committed"] is True
        assert "t1" in error.message
        assert "after 2 attempts" in error.message

    def test_commit_failed_names_collection_and_attempts(self) -> None:
        error = CommitError.failed("t1", "status 500", attempts=4)
        assert error.details["committed"] is False
        assert str(error) == (
            "[3005] COMMIT_FAILED: Could not commit collection t1 after 4 attempts: status 500"
        )

    def test_delete_failed(self) -> None:
        error = CommitError.delete_failed("dbv-searches", "s1", "status 500", attempts=1)
        assert error.code == ErrorCode.DELETE_FAILED
        assert error.details["document_id"] == "s1"
        assert error.details["attempts"] == 1
        assert "dbv-searches after 1 attempts" in error.message

    def test_release_cancel_and_closed(self) -> None:
        assert ResourceReleaseError.close_failed("io").code == ErrorCode.RESOURCE_RELEASE_FAILED
        cancelled = IndexingCancelledError.during("flush", 3)
        assert cancelled.details == {"operation": "flush", "attempts": 3}
        assert PipelineClosedError.closed("enqueue").code == ErrorCode.PIPELINE_CLOSED
