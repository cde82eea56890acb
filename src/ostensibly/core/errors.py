"""Ostensibly error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Load (source files, grammars)
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003
    CONFIG_FILE_NOT_FOUND = 2004

    # Load (3xxx)
    LOAD_ENTRY_NOT_FOUND = 3001
    LOAD_UNREADABLE_SOURCE = 3002
    LOAD_GRAMMAR_UNAVAILABLE = 3003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class OstensiblyError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(OstensiblyError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def missing_required(cls, field: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_MISSING_REQUIRED,
            message=f"Missing required config field: {field}",
            details={"field": field},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class LoadError(OstensiblyError):
    """Source loading errors. Always fatal for a generation run."""

    @classmethod
    def entry_not_found(cls, path: str) -> "LoadError":
        return cls(
            code=ErrorCode.LOAD_ENTRY_NOT_FOUND,
            message=f"Entry file not found: {path}",
            details={"path": path},
        )

    @classmethod
    def unreadable_source(cls, path: str, reason: str) -> "LoadError":
        return cls(
            code=ErrorCode.LOAD_UNREADABLE_SOURCE,
            message=f"Failed to read source file {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def grammar_unavailable(cls, grammar: str) -> "LoadError":
        return cls(
            code=ErrorCode.LOAD_GRAMMAR_UNAVAILABLE,
            message=f"Tree-sitter grammar not available: {grammar}",
            details={"grammar": grammar},
        )


class InternalError(OstensiblyError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
