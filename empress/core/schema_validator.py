"""
Schema Validator - Structural check of xAPI statements before they are stored.

Philosophy:
- The validator is the only gate in front of the database
- Report every violation, not just the first one
- No side effects: same input, same verdict

The shape is expressed as Pydantic models. Only the fields below are
enforced; everything else on a statement (timestamp, result, duration,
authority, ...) passes through untouched.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr
from pydantic import ValidationError as PydanticValidationError


class ActorShape(BaseModel):
    """Who acted. ``mbox`` is conventionally a mailto: URI."""

    model_config = ConfigDict(extra="allow")

    name: StrictStr
    mbox: StrictStr


class VerbShape(BaseModel):
    """What was done. ``display`` maps language tags to text."""

    model_config = ConfigDict(extra="allow")

    id: StrictStr
    display: dict[str, Any]


class StatementShape(BaseModel):
    """Minimal xAPI statement: actor, verb and object are all required."""

    model_config = ConfigDict(extra="allow")

    actor: ActorShape
    verb: VerbShape
    object_: dict[str, Any] = Field(alias="object")


@dataclass(frozen=True)
class Violation:
    """A single failed constraint."""

    path: str
    kind: str  # 'missing', 'type' or 'unregistered'
    message: str

    def describe(self) -> str:
        return f"{self.path or '<root>'}: {self.message}"


@dataclass
class ValidationResult:
    """Verdict for one statement."""

    valid: bool
    errors: list[Violation] = field(default_factory=list)


def _to_violation(item: dict[str, Any]) -> Violation:
    path = ".".join(str(part) for part in item.get("loc", ()))
    if item.get("type") == "missing":
        return Violation(path=path, kind="missing", message="is required")
    return Violation(path=path, kind="type", message=item.get("msg", "has the wrong type"))


def validate_statement(record: Any) -> ValidationResult:
    """
    Check a candidate record against the statement shape.

    Violations come back in field order: actor, actor.name, actor.mbox,
    verb, verb.id, verb.display, object. A missing or mistyped parent
    hides the checks on its children.
    """
    try:
        StatementShape.model_validate(record)
    except PydanticValidationError as exc:
        return ValidationResult(
            valid=False,
            errors=[_to_violation(item) for item in exc.errors()],
        )
    return ValidationResult(valid=True)


def is_valid(record: Any) -> bool:
    return validate_statement(record).valid


def filter_valid(records: Iterable[Any]) -> tuple[list[Any], int]:
    """Keep only statements that pass. Returns (valid_records, rejected_count)."""
    valid = []
    rejected = 0
    for record in records:
        if is_valid(record):
            valid.append(record)
        else:
            rejected += 1
    return valid, rejected
