"""
Command results.

Every handler returns a CommandResult instead of raising, so the caller
decides whether a failure becomes a non-zero exit code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CommandResult:
    """Outcome of one command invocation."""

    command: str
    ok: bool
    message: str = ""
    data: Any = None
    error: str | None = None
    details: list[str] = field(default_factory=list)

    @classmethod
    def success(cls, command: str, message: str = "", data: Any = None) -> CommandResult:
        return cls(command=command, ok=True, message=message, data=data)

    @classmethod
    def failure(
        cls,
        command: str,
        error: Exception | str,
        details: list[str] | None = None,
    ) -> CommandResult:
        return cls(
            command=command,
            ok=False,
            error=type(error).__name__ if isinstance(error, Exception) else "Error",
            message=str(error),
            details=details or [],
        )
