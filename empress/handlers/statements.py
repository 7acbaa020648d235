"""
Statement handlers: writing, validating and looking up xAPI statements.

Single-statement creation rejects invalid input outright. Bulk ingestion
(bulk-store, bulkImport, import-statements) keeps only the statements that
pass validation and fails only when none do.
"""

from __future__ import annotations

from typing import Any

from bson import ObjectId
from bson import json_util
from bson.errors import BSONError, InvalidId
from loguru import logger

from empress.core.errors import MalformedInput, ValidationFailed
from empress.core.results import CommandResult
from empress.core.schema_validator import filter_valid, validate_statement
from empress.db.gateway import StatementGateway
from empress.handlers.base import (
    command_handler,
    parse_json_argument,
    parse_json_array,
    parse_json_object,
    read_json_file,
)


# ========================================
# Writes
# ========================================


@command_handler("create")
def create(gateway: StatementGateway, data: str) -> CommandResult:
    """Validate one statement and insert it."""
    record = parse_json_argument(data, "statement")
    verdict = validate_statement(record)
    if not verdict.valid:
        raise ValidationFailed(verdict.errors)

    gateway.insert_one(record)
    logger.info("Record created successfully")
    return CommandResult.success(
        "create",
        "Record created successfully",
        data={"inserted_id": str(record.get("_id", ""))},
    )


def store_valid(gateway: StatementGateway, records: list[Any]) -> dict[str, int]:
    """
    Insert the statements that pass validation.

    Raises ValidationFailed (and inserts nothing) when no statement is valid.
    """
    valid, rejected = filter_valid(records)
    if not valid:
        raise ValidationFailed([], message="No valid records found")

    inserted = gateway.insert_many(valid)
    if rejected:
        logger.warning(f"{rejected} invalid records skipped")
    logger.info(f"{inserted} records inserted successfully")
    return {"inserted": inserted, "rejected": rejected}


def _strip_ids(records: list[Any]) -> list[Any]:
    # Re-imported statements get fresh ids
    return [
        {k: v for k, v in record.items() if k != "_id"} if isinstance(record, dict) else record
        for record in records
    ]


def _load_records(filepath: str) -> list[Any]:
    records = read_json_file(filepath)
    if not isinstance(records, list):
        raise MalformedInput(f"Expected a JSON array of statements in {filepath}")
    return _strip_ids(records)


@command_handler("bulk-store")
def bulk_store(gateway: StatementGateway, data: str) -> CommandResult:
    counts = store_valid(gateway, parse_json_array(data, "statements"))
    return CommandResult.success(
        "bulk-store", f"{counts['inserted']} records inserted successfully", data=counts
    )


@command_handler("bulkImport")
def bulk_import(gateway: StatementGateway, filepath: str) -> CommandResult:
    counts = store_valid(gateway, _load_records(filepath))
    return CommandResult.success(
        "bulkImport", f"{counts['inserted']} records inserted successfully", data=counts
    )


@command_handler("import-statements")
def import_statements(gateway: StatementGateway, file_path: str) -> CommandResult:
    counts = store_valid(gateway, _load_records(file_path))
    return CommandResult.success(
        "import-statements",
        f"Statements imported from {file_path}: {counts['inserted']} stored",
        data=counts,
    )


@command_handler("validate")
def validate(data: str) -> CommandResult:
    """Check a statement without storing it."""
    verdict = validate_statement(parse_json_argument(data, "statement"))
    if not verdict.valid:
        raise ValidationFailed(verdict.errors)
    return CommandResult.success("validate", "Statement is valid", data={"valid": True})


@command_handler("set-statement-authority")
def set_statement_authority(
    gateway: StatementGateway, statement_id: str, authority: str
) -> CommandResult:
    """
    Set ``authority`` on one statement.

    The authority is stored as parsed JSON when it parses, otherwise as text.
    A statement id that matches nothing still reports success.
    """
    try:
        object_id = ObjectId(statement_id)
    except (InvalidId, TypeError) as exc:
        raise MalformedInput(f"Invalid statement id '{statement_id}': {exc}") from exc

    try:
        value: Any = json_util.loads(authority)
    except (ValueError, TypeError, ArithmeticError, RecursionError, BSONError):
        value = authority

    matched = gateway.update_one({"_id": object_id}, {"authority": value})
    logger.debug("set-statement-authority matched {} document(s)", matched)
    return CommandResult.success(
        "set-statement-authority",
        f"Authority set for statement {statement_id}.",
        data={"matched": matched},
    )


# ========================================
# Lookups
# ========================================


@command_handler("query")
def query(gateway: StatementGateway, filter: str) -> CommandResult:
    results = gateway.find(parse_json_object(filter))
    return CommandResult.success("query", f"{len(results)} statements found", data=results)


@command_handler("analyzeActivity")
def analyze_activity(gateway: StatementGateway, activity_id: str) -> CommandResult:
    """Every statement whose object is the given activity."""
    interactions = gateway.find({"object.id": activity_id})
    return CommandResult.success(
        "analyzeActivity",
        f"{len(interactions)} interactions with {activity_id}",
        data=interactions,
    )


@command_handler("search-statements")
def search_statements(gateway: StatementGateway, text: str) -> CommandResult:
    """Full-text search. Needs a text index on the collection."""
    results = gateway.find({"$text": {"$search": text}})
    return CommandResult.success("search-statements", "Search Results:", data=results)


@command_handler("visualize-actor-progress")
def visualize_actor_progress(gateway: StatementGateway, actor_id: str) -> CommandResult:
    """An actor's statements in timestamp order. ``actor_id`` is the actor's mbox."""
    progress = gateway.find({"actor.mbox": actor_id}, sort=[("timestamp", 1)])
    return CommandResult.success("visualize-actor-progress", "Progress Data:", data=progress)


def _duration_bound(value: str) -> int | float | str:
    try:
        number = float(value)
    except ValueError:
        return value
    return int(number) if number.is_integer() else number


@command_handler("get-statements-by-duration")
def statements_by_duration(
    gateway: StatementGateway, min_duration: str, max_duration: str
) -> CommandResult:
    """
    Statements whose ``duration`` lies in [min, max].

    Numeric bounds compare numerically; anything else (ISO 8601 durations
    such as ``PT30M``) compares as stored strings.
    """
    statements = gateway.find(
        {"duration": {"$gte": _duration_bound(min_duration), "$lte": _duration_bound(max_duration)}}
    )
    return CommandResult.success("get-statements-by-duration", "Statements:", data=statements)


@command_handler("visualizeData")
def visualize_data(filter: str) -> CommandResult:
    # Rendering is not implemented; the parsed filter is echoed back.
    parsed = parse_json_object(filter)
    return CommandResult.success("visualizeData", "Visualization for filter:", data=parsed)
