"""Error taxonomy for XML context building.

Fatal conditions are raised as ``ContextBuildError`` subclasses and unwind every
enclosing build scope. Non-fatal conditions never raise; they are reported as
diagnostics tagged with the matching ``BuildIssue``. Unknown properties, unknown
child elements, unknown channel types and DTD validity errors are non-fatal.
"""

from enum import Enum, auto
from typing import Optional


class BuildIssue(Enum):
    """Classification of everything that can go wrong while building a context."""

    MALFORMED_DOCUMENT = auto()      # Parse failure or unexpected root element
    MISSING_REQUIRED_FIELD = auto()  # Absent device/channel id or attribute name
    ALLOCATION_FAILURE = auto()      # Resource exhaustion while growing the graph
    UNKNOWN_FIELD = auto()           # Unrecognized property or child element
    UNKNOWN_CHANNEL_TYPE = auto()    # Channel type other than input/output
    DTD_INVALID = auto()             # Document does not match its declared DTD

    @property
    def is_fatal(self) -> bool:
        """Check whether this issue aborts the build."""
        return self in (
            BuildIssue.MALFORMED_DOCUMENT,
            BuildIssue.MISSING_REQUIRED_FIELD,
            BuildIssue.ALLOCATION_FAILURE,
        )


class ContextBuildError(Exception):
    """Base exception for fatal context build failures."""

    issue = BuildIssue.MALFORMED_DOCUMENT

    def __init__(
        self,
        message: str,
        element: Optional[str] = None,
        field_name: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.element = element
        self.field_name = field_name


class MalformedDocument(ContextBuildError):
    """Raised when the document cannot be parsed or has the wrong root element."""

    issue = BuildIssue.MALFORMED_DOCUMENT


class MissingRequiredField(ContextBuildError):
    """Raised when a device or channel lacks ``id`` or an attribute lacks ``name``."""

    issue = BuildIssue.MISSING_REQUIRED_FIELD


class AllocationFailure(ContextBuildError):
    """Raised when memory runs out while the object graph is being built."""

    issue = BuildIssue.ALLOCATION_FAILURE
