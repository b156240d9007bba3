"""Shared utilities for XML context building.

This module provides the error taxonomy, configuration objects, result types,
and logging helpers used across the document, model and API layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    LoaderConfig,
)
from .errors import (
    AllocationFailure,
    BuildIssue,
    ContextBuildError,
    MalformedDocument,
    MissingRequiredField,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    BuildResult,
    DiagnosticEntry,
    DiagnosticSeverity,
)

__all__ = [
    "AllocationFailure",
    "BuildIssue",
    "BuildResult",
    "ConfigError",
    "ConfigValidationError",
    "ContextBuildError",
    "CorrelationLogger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "LoaderConfig",
    "MalformedDocument",
    "MissingRequiredField",
    "get_logger",
]
