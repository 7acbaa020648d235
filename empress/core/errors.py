"""
Error taxonomy for empress-cli.

Handlers are the error boundary: everything below them raises one of these,
and the handler turns it into a failing CommandResult. Only ConfigError is
allowed to stop the process.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from empress.core.schema_validator import Violation


class EmpressError(Exception):
    """Base class for all errors raised by empress-cli."""


class ConfigError(EmpressError):
    """Raised when the settings cannot be loaded."""


class ConfigMissing(ConfigError):
    """Raised when required environment variables are not set."""

    def __init__(self, variables: list[str]):
        self.variables = variables
        super().__init__(
            f"Environment variables {', '.join(variables)} are not set"
        )


class ConfigInvalid(ConfigError):
    """Raised when a variable is set but cannot be used (e.g. not a number)."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__(f"Invalid configuration: {'; '.join(problems)}")


class MalformedInput(EmpressError):
    """Raised when a command argument or input file cannot be parsed."""


class FileAccessError(EmpressError):
    """Raised when an input file cannot be read or an export cannot be written."""


class ValidationFailed(EmpressError):
    """Raised when a statement does not match the xAPI shape."""

    def __init__(self, violations: list[Violation], message: str | None = None):
        self.violations = violations
        if message is None:
            details = "; ".join(v.describe() for v in violations)
            message = f"Validation failed: {details}"
        super().__init__(message)


class DataStoreError(EmpressError):
    """Raised when a MongoDB operation fails."""


class DataStoreConnectionError(DataStoreError):
    """Raised when MongoDB cannot be reached."""


class QueryError(DataStoreError):
    """Raised when MongoDB rejects or fails an operation."""


class ExternalToolError(EmpressError):
    """Raised when mongodump/mongorestore is missing or exits non-zero."""
