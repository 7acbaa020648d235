"""
Shared plumbing for command handlers.

Handlers are plain functions that take a gateway (when they need the
database) plus the command's text arguments, and return a CommandResult.
The ``command_handler`` decorator is the error boundary: any EmpressError
raised inside is logged with the command name and its input, then turned
into a failing result instead of propagating.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from pathlib import Path
from typing import Any

from bson import json_util
from bson.errors import BSONError
from loguru import logger

from empress.core.errors import EmpressError, FileAccessError, MalformedInput, ValidationFailed
from empress.core.results import CommandResult

# Longest input echoed into the log for a failing command
MAX_LOGGED_INPUT = 200


def parse_json_argument(text: str, what: str = "argument") -> Any:
    """
    Parse a JSON command argument.

    MongoDB Extended JSON is accepted, so filters can carry
    ``{"$oid": ...}`` or ``{"$date": ...}`` values.
    """
    try:
        return json_util.loads(text)
    except (ValueError, TypeError, ArithmeticError, RecursionError, BSONError) as exc:
        # bad $numberDecimal values raise decimal.InvalidOperation (an ArithmeticError)
        raise MalformedInput(f"Invalid JSON {what}: {exc}") from exc


def parse_json_object(text: str, what: str = "filter") -> dict[str, Any]:
    value = parse_json_argument(text, what)
    if not isinstance(value, dict):
        raise MalformedInput(f"Expected a JSON object for {what}, got {type(value).__name__}")
    return value


def parse_json_array(text: str, what: str = "data") -> list[Any]:
    value = parse_json_argument(text, what)
    if not isinstance(value, list):
        raise MalformedInput(f"Expected a JSON array for {what}, got {type(value).__name__}")
    return value


def read_json_file(path: str | Path) -> Any:
    """Read and parse a JSON file."""
    file_path = Path(path)
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FileAccessError(f"Cannot read {file_path}: {exc}") from exc
    return parse_json_argument(content, f"in {file_path}")


def _summarize(args: tuple[Any, ...]) -> str:
    text = ", ".join(repr(a) for a in args if isinstance(a, (str, Path)))
    if len(text) > MAX_LOGGED_INPUT:
        return text[:MAX_LOGGED_INPUT] + "..."
    return text


def command_handler(name: str) -> Callable[[Callable[..., CommandResult]], Callable[..., CommandResult]]:
    """Mark a function as the handler of CLI command ``name``."""

    def decorator(func: Callable[..., CommandResult]) -> Callable[..., CommandResult]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> CommandResult:
            try:
                return func(*args, **kwargs)
            except ValidationFailed as exc:
                details = [v.describe() for v in exc.violations]
                logger.error("Error during {}: {} | input: {}", name, exc, _summarize(args))
                return CommandResult.failure(name, exc, details=details)
            except EmpressError as exc:
                logger.error("Error during {}: {} | input: {}", name, exc, _summarize(args))
                return CommandResult.failure(name, exc)

        wrapper.command_name = name  # type: ignore[attr-defined]
        return wrapper

    return decorator
