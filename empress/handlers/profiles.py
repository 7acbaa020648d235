"""
Profile & vocabulary handlers.

Verbs and activity types are registered in their own collections. A
profile check is the structural validation plus a lookup of the verb in
the verb registry.
"""

from __future__ import annotations

import copy
from typing import Any

from loguru import logger

from empress.core.errors import ValidationFailed
from empress.core.results import CommandResult
from empress.core.schema_validator import Violation, validate_statement
from empress.db.gateway import StatementGateway
from empress.handlers.base import command_handler, parse_json_argument

DEFAULT_LANGUAGE = "en-US"

STATEMENT_TEMPLATE: dict[str, Any] = {
    "actor": {
        "name": "INSERT_ACTOR_NAME",
        "mbox": "INSERT_ACTOR_MBOX",
    },
    "verb": {
        "id": "INSERT_VERB_ID",
        "display": {DEFAULT_LANGUAGE: "INSERT_DISPLAY_TEXT"},
    },
    "object": {
        "objectType": "Activity",
    },
}


def generate_template() -> dict[str, Any]:
    """A fresh copy of the statement skeleton."""
    return copy.deepcopy(STATEMENT_TEMPLATE)


def verb_display(verb_id: str) -> str:
    """Display text for a verb id: its last path segment."""
    segment = verb_id.rstrip("/").rsplit("/", 1)[-1]
    return segment or verb_id


def build_statement(actor_name: str, actor_mbox: str, verb_id: str, object_name: str) -> dict[str, Any]:
    """Assemble a statement from interactive answers. Not validated here."""
    return {
        "actor": {"name": actor_name, "mbox": actor_mbox},
        "verb": {"id": verb_id, "display": {DEFAULT_LANGUAGE: verb_display(verb_id)}},
        "object": {"objectType": "Activity", "name": object_name},
    }


@command_handler("register-verb")
def register_verb(
    gateway: StatementGateway, collection: str, verb: str, definition: str
) -> CommandResult:
    gateway.insert_into(collection, {"verb": verb, "definition": definition})
    logger.info(f"Registered new verb: {verb}")
    return CommandResult.success("register-verb", f"Verb '{verb}' registered successfully.")


@command_handler("register-activity-type")
def register_activity_type(
    gateway: StatementGateway, collection: str, activity_type: str, definition: str
) -> CommandResult:
    gateway.insert_into(collection, {"type": activity_type, "definition": definition})
    logger.info(f"Registered new activity type: {activity_type}")
    return CommandResult.success(
        "register-activity-type", f"Activity type '{activity_type}' registered successfully."
    )


@command_handler("check-profile")
def check_profile(
    gateway: StatementGateway, verbs_collection: str, profile_id: str, statement: str
) -> CommandResult:
    """
    Check a statement against a profile.

    The statement must be structurally valid, and when any verbs are
    registered its verb id must be one of them. An empty registry accepts
    every verb.
    """
    record = parse_json_argument(statement, "statement")
    verdict = validate_statement(record)
    if not verdict.valid:
        raise ValidationFailed(verdict.errors)

    registered = gateway.distinct_in(verbs_collection, "verb")
    verb_id = record["verb"]["id"]
    if registered and verb_id not in registered:
        raise ValidationFailed(
            [Violation(path="verb.id", kind="unregistered", message=f"'{verb_id}' is not a registered verb")],
            message=f"Statement does not conform to profile {profile_id}",
        )

    return CommandResult.success(
        "check-profile",
        f"Statement checked against the profile {profile_id}.",
        data={"profile": profile_id, "conforms": True},
    )
