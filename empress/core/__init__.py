"""
Core Module - shared building blocks for every command.

Components:
- errors: EmpressError hierarchy
- results: CommandResult returned by handlers
- schema_validator: xAPI statement shape check
- logging: loguru sink configuration
"""

from empress.core.errors import (
    ConfigError,
    ConfigInvalid,
    ConfigMissing,
    DataStoreConnectionError,
    DataStoreError,
    EmpressError,
    ExternalToolError,
    FileAccessError,
    MalformedInput,
    QueryError,
    ValidationFailed,
)
from empress.core.results import CommandResult
from empress.core.schema_validator import (
    ValidationResult,
    Violation,
    filter_valid,
    validate_statement,
)

__all__ = [
    "CommandResult",
    "ConfigError",
    "ConfigInvalid",
    "ConfigMissing",
    "DataStoreConnectionError",
    "DataStoreError",
    "EmpressError",
    "ExternalToolError",
    "FileAccessError",
    "MalformedInput",
    "QueryError",
    "ValidationFailed",
    "ValidationResult",
    "Violation",
    "filter_valid",
    "validate_statement",
]
