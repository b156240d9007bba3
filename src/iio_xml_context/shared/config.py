"""Configuration for XML context loading.

This module provides the immutable configuration object that controls how the
document parsing collaborator is set up and how unknown content is reported.
"""

import json
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, List, Optional

STRICT_MAX_INPUT_SIZE_BYTES = 16 * 1024 * 1024


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class LoaderConfig:
    """Configuration for the document parser and the context builders.

    Thread-safe due to frozen dataclass implementation.
    """

    # Parsing collaborator
    dtd_validation: bool = True
    dtd_errors_fatal: bool = False
    load_dtd: bool = True
    no_network: bool = True
    resolve_entities: bool = False
    huge_tree: bool = False
    max_input_size_bytes: Optional[int] = None

    # Builders
    warn_on_unknown: bool = True

    # Metadata
    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate loader configuration."""
        if self.max_input_size_bytes is not None and self.max_input_size_bytes <= 0:
            raise ConfigValidationError(
                "max_input_size_bytes must be > 0 or None",
                field_name="max_input_size_bytes",
            )
        if self.dtd_validation and not self.load_dtd:
            raise ConfigValidationError(
                "dtd_validation requires load_dtd",
                field_name="load_dtd",
                suggestions=["Set load_dtd=True", "Disable dtd_validation"],
            )
        if self.dtd_errors_fatal and not self.dtd_validation:
            raise ConfigValidationError(
                "dtd_errors_fatal requires dtd_validation",
                field_name="dtd_errors_fatal",
                suggestions=["Set dtd_validation=True", "Disable dtd_errors_fatal"],
            )

    def override(self, **kwargs: Any) -> "LoaderConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> config = LoaderConfig().override(dtd_validation=False)
            >>> config.dtd_validation
            False
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration field(s): {', '.join(unknown)}",
                field_name=unknown[0],
            )
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoaderConfig":
        """Create configuration from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_json(cls, json_str: str) -> "LoaderConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def strict(cls) -> "LoaderConfig":
        """Reject documents that break their DTD and cap the input size."""
        return cls(
            dtd_validation=True,
            dtd_errors_fatal=True,
            load_dtd=True,
            no_network=True,
            resolve_entities=False,
            max_input_size_bytes=STRICT_MAX_INPUT_SIZE_BYTES,
            name="strict",
        )

    @classmethod
    def lenient(cls) -> "LoaderConfig":
        """Skip DTD validation; only structural checks of the builders apply."""
        return cls(
            dtd_validation=False,
            load_dtd=False,
            name="lenient",
        )
