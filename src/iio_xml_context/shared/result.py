"""Result objects and diagnostic types for XML context building.

This module defines the diagnostics collected while walking a document and the
result object returned by the configurable loader.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .errors import BuildIssue, ContextBuildError

if TYPE_CHECKING:
    from iio_xml_context.model.entities import Context


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()
    WARNING = auto()    # Unknown content that was skipped
    ERROR = auto()      # Fatal build failures


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    issue: Optional[BuildIssue] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")


@dataclass
class BuildResult:
    """Outcome of one load operation.

    ``context`` is only set when the whole build succeeded; a failed build never
    exposes a partially populated context.
    """

    context: Optional["Context"] = None
    success: bool = False
    error: Optional[ContextBuildError] = None
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    processing_time_ms: float = 0.0
    source: Optional[str] = None
    correlation_id: Optional[str] = None

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        issue: Optional[BuildIssue] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                issue=issue,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def get_diagnostics_by_issue(self, issue: BuildIssue) -> List[DiagnosticEntry]:
        """Get diagnostics tagged with a specific build issue."""
        return [diag for diag in self.diagnostics if diag.issue == issue]

    @property
    def warnings(self) -> List[DiagnosticEntry]:
        return self.get_diagnostics_by_severity(DiagnosticSeverity.WARNING)

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity == DiagnosticSeverity.ERROR for diag in self.diagnostics
        )

    @property
    def summary(self) -> Dict[str, Any]:
        """Get a plain-data summary of the load operation."""
        context = self.context
        return {
            "source": self.source,
            "success": self.success,
            "error": self.error.message if self.error else None,
            "issue": self.error.issue.name if self.error else None,
            "device_count": len(context.devices) if context else 0,
            "channel_count": (
                sum(len(dev.channels) for dev in context.devices) if context else 0
            ),
            "warning_count": len(self.warnings),
            "processing_time_ms": self.processing_time_ms,
        }
