"""
Unit Tests for ErrorHandler.

Test Aspects Covered:
    ✅ Business Logic: Invocation wrapping, failure counting
    ✅ Edge Cases: Immediate success, nested invocation errors
    ✅ Reporting: Partial failure messages with truncated file lists,
       empty folder warnings shared by the orchestrator and the explorer
"""

from __future__ import annotations

import ast
import inspect
from unittest.mock import Mock

import pytest

from dicom_workbench.domain.entities import AnonymizationReport, ConversionReport
from dicom_workbench.explorer import session
from dicom_workbench.interfaces.remote_gateway import RemoteCallError
from dicom_workbench.pipeline import orchestrator
from dicom_workbench.resilience.error_handler import (
    ErrorHandler,
    InvocationError,
    describe_partial_failure,
    empty_folder_warning,
)


class TestInvoke:
    """Test cases for ErrorHandler.invoke."""

    def test_returns_result_on_success(self) -> None:
        """
        SCENARIO: Call succeeds
        EXPECTED: Result returned, called exactly once
        """
        # Arrange
        handler = ErrorHandler()
        mock_func = Mock(return_value=["a.dcm"])

        # Act
        result = handler.invoke(mock_func, "list_records", "/data")

        # Assert
        assert result == ["a.dcm"]
        assert mock_func.call_count == 1
        assert handler.failure_count("list_records") == 0

    def test_wraps_rejection(self) -> None:
        """
        SCENARIO: Backend rejects the call
        EXPECTED: InvocationError naming operation and path, no retry
        """
        # Arrange
        handler = ErrorHandler()
        cause = RemoteCallError("Failed to read directory")
        mock_func = Mock(side_effect=cause)

        # Act & Assert
        with pytest.raises(InvocationError) as exc_info:
            handler.invoke(mock_func, "anonymize", "/data/study")

        error = exc_info.value
        assert error.operation == "anonymize"
        assert error.path == "/data/study"
        assert error.cause is cause
        assert error.__cause__ is cause
        assert error.message == "anonymize failed on /data/study: Failed to read directory"
        assert mock_func.call_count == 1
        assert handler.failure_count("anonymize") == 1

    def test_message_without_path(self) -> None:
        error = InvocationError("get_tags", None, cause=ValueError("bad"))

        assert error.message == "get_tags failed: bad"
        assert error.run is None

    def test_invocation_error_passes_through(self) -> None:
        handler = ErrorHandler()
        inner = InvocationError("convert", "/out")

        with pytest.raises(InvocationError) as exc_info:
            handler.invoke(Mock(side_effect=inner), "outer", "/x")

        assert exc_info.value is inner
        assert handler.failures == {}


class TestDescribePartialFailure:
    """Test cases for describe_partial_failure."""

    def test_clean_report(self) -> None:
        assert describe_partial_failure(AnonymizationReport(total=3, successful=3)) is None

    def test_names_failed_files(self) -> None:
        report = AnonymizationReport(total=10, successful=8, failed=2, failed_files=["a.dcm", "b.dcm"])

        message = describe_partial_failure(report)

        assert message == "Anonymize: 2 of 10 files failed (a.dcm, b.dcm)"

    def test_counts_skipped_files(self) -> None:
        report = ConversionReport(
            total=4, successful=2, failed=1, skipped=1,
            failed_files=["bad.dcm"], skipped_files=["sr.dcm"],
        )

        message = describe_partial_failure(report)

        assert message.startswith("Convert: 1 of 4 files failed, 1 files already existed")
        assert message.endswith("(bad.dcm, sr.dcm)")

    def test_truncates_long_lists(self) -> None:
        files = [f"f{i}.dcm" for i in range(15)]
        report = AnonymizationReport(total=15, failed=15, failed_files=files)

        message = describe_partial_failure(report, max_files=3)

        assert message.endswith("(f0.dcm, f1.dcm, f2.dcm (+12 more))")


class TestEmptyFolderWarning:
    """Test cases for empty_folder_warning."""

    def test_names_folder(self) -> None:
        assert empty_folder_warning("/data/none") == "No eligible records found in /data/none"

    def test_shared_by_pipeline_and_explorer(self) -> None:
        """
        SCENARIO: Orchestrator and explorer session both warn on empty folders
        EXPECTED: Both use the resilience helper, the pipeline layer does not
                  reach into the explorer package for it
        """
        assert orchestrator.empty_folder_warning is empty_folder_warning
        assert session.empty_folder_warning is empty_folder_warning
        tree = ast.parse(inspect.getsource(orchestrator))
        imported = [node.module for node in ast.walk(tree) if isinstance(node, ast.ImportFrom)]
        assert not any(module.startswith("dicom_workbench.explorer") for module in imported)
