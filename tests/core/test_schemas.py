"""Tests for batch option and result schemas."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from bulkops.core.errors import ErrorKind, FileOperationError
from bulkops.core.schemas import (
    BatchFailure,
    BatchOperationOptions,
    BatchOperationResult,
    RollbackOperation,
    RollbackReport,
)


class TestBatchOperationOptions:
    """Test the closed options model."""

    def test_defaults(self) -> None:
        options = BatchOperationOptions()

        assert options.continue_on_error is True
        assert options.enable_rollback is False
        assert options.max_concurrency == 5
        assert options.progress_callback is None
        assert options.max_retries == 0

    def test_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValidationError):
            BatchOperationOptions(dry_run=True)  # type: ignore[call-arg]

    def test_rejects_non_positive_concurrency(self) -> None:
        with pytest.raises(ValidationError):
            BatchOperationOptions(max_concurrency=0)

    def test_rejects_negative_retries(self) -> None:
        with pytest.raises(ValidationError):
            BatchOperationOptions(max_retries=-1)

    def test_accepts_callable_progress_callback(self) -> None:
        calls = []

        options = BatchOperationOptions(
            progress_callback=lambda done, total, path: calls.append(done)
        )
        options.progress_callback(1, 2, None)

        assert calls == [1]

    def test_rejects_non_callable_progress_callback(self) -> None:
        with pytest.raises(ValidationError):
            BatchOperationOptions(progress_callback="print")  # type: ignore[arg-type]

    def test_is_frozen(self) -> None:
        options = BatchOperationOptions()

        with pytest.raises(ValidationError):
            options.max_concurrency = 10  # type: ignore[misc]


class TestBatchOperationResult:
    """Test result aggregation helpers."""

    def test_to_dict(self) -> None:
        error = FileOperationError(
            ErrorKind.FILE_NOT_FOUND, "/src/missing.txt", "Source does not exist"
        )
        result = BatchOperationResult(
            successful=[Path("/src/a.txt")],
            failed=[BatchFailure(Path("/src/missing.txt"), error)],
            total_processed=2,
        )

        payload = result.to_dict()

        assert payload["successful"] == ["/src/a.txt"]
        assert payload["failed"][0]["path"] == "/src/missing.txt"
        assert payload["failed"][0]["error"] == "FILE_NOT_FOUND"
        assert payload["total_processed"] == 2

    def test_empty_result(self) -> None:
        result = BatchOperationResult()

        assert result.successful == []
        assert result.failed == []
        assert result.total_processed == 0


def test_rollback_operation_defaults() -> None:
    operation = RollbackOperation("delete", Path("/src/dir"))

    assert operation.target_path is None
    assert operation.content is None
    assert operation.backup_path is None


def test_rollback_report_failed_count() -> None:
    report = RollbackReport(undone=2, failures=["copy /a: boom"])

    assert report.failed == 1
    assert report.skipped == 0
