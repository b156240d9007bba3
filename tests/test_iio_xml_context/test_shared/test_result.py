"""Tests for diagnostics, build results and the error taxonomy."""

import pytest

from iio_xml_context.model import Context, Device
from iio_xml_context.shared import (
    AllocationFailure,
    BuildIssue,
    BuildResult,
    ContextBuildError,
    DiagnosticEntry,
    DiagnosticSeverity,
    MalformedDocument,
    MissingRequiredField,
)


class TestBuildIssue:
    """Test classification of build issues."""

    @pytest.mark.parametrize("issue, fatal", [
        (BuildIssue.MALFORMED_DOCUMENT, True),
        (BuildIssue.MISSING_REQUIRED_FIELD, True),
        (BuildIssue.ALLOCATION_FAILURE, True),
        (BuildIssue.UNKNOWN_FIELD, False),
        (BuildIssue.UNKNOWN_CHANNEL_TYPE, False),
        (BuildIssue.DTD_INVALID, False),
    ])
    def test_is_fatal(self, issue: BuildIssue, fatal: bool) -> None:
        """Test which issues abort a build."""
        assert issue.is_fatal is fatal


class TestErrors:
    """Test the exception hierarchy."""

    @pytest.mark.parametrize("error_cls, issue", [
        (MalformedDocument, BuildIssue.MALFORMED_DOCUMENT),
        (MissingRequiredField, BuildIssue.MISSING_REQUIRED_FIELD),
        (AllocationFailure, BuildIssue.ALLOCATION_FAILURE),
    ])
    def test_issue_per_error(self, error_cls, issue: BuildIssue) -> None:
        """Test that each error class carries its issue and context."""
        error = error_cls("boom", element="device", field_name="id")

        assert isinstance(error, ContextBuildError)
        assert error.issue is issue
        assert error.message == "boom"
        assert str(error) == "boom"
        assert error.element == "device"
        assert error.field_name == "id"


class TestDiagnosticEntry:
    """Test diagnostic entry validation."""

    def test_empty_message_rejected(self) -> None:
        """Test that an empty message is rejected."""
        with pytest.raises(ValueError, match="message cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.WARNING, "", "builder")

    def test_empty_component_rejected(self) -> None:
        """Test that an empty component is rejected."""
        with pytest.raises(ValueError, match="component cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.WARNING, "msg", "")


class TestBuildResult:
    """Test build result helpers."""

    def test_empty_result(self) -> None:
        """Test the state of a fresh result."""
        result = BuildResult()

        assert not result.success
        assert result.context is None
        assert result.warnings == []
        assert not result.has_errors()
        assert result.summary["device_count"] == 0

    def test_diagnostic_filters(self) -> None:
        """Test filtering diagnostics by severity and issue."""
        result = BuildResult(correlation_id="abc")
        result.add_diagnostic(
            DiagnosticSeverity.WARNING, "unknown", "device_builder", BuildIssue.UNKNOWN_FIELD
        )
        result.add_diagnostic(
            DiagnosticSeverity.ERROR, "missing", "loader", BuildIssue.MISSING_REQUIRED_FIELD
        )

        assert [d.message for d in result.warnings] == ["unknown"]
        assert result.has_errors()
        assert len(result.get_diagnostics_by_issue(BuildIssue.MISSING_REQUIRED_FIELD)) == 1
        assert all(d.correlation_id == "abc" for d in result.diagnostics)

    def test_summary_counts(self) -> None:
        """Test device and channel counts in the summary."""
        context = Context(devices=[Device(id="a"), Device(id="b")])
        result = BuildResult(context=context, success=True, source="x.xml")

        summary = result.summary

        assert summary["source"] == "x.xml"
        assert summary["device_count"] == 2
        assert summary["channel_count"] == 0
        assert summary["error"] is None
