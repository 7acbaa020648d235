"""
Report handlers: distinct listings, counts and aggregations.

Each report is one round trip; multi-step reports are a single pipeline
from empress.db.pipelines.
"""

from __future__ import annotations

from empress.core.errors import MalformedInput
from empress.core.results import CommandResult
from empress.db.gateway import StatementGateway
from empress.db.pipelines import (
    average_score_pipeline,
    group_by_date_pipeline,
    most_active_actors_pipeline,
    verb_usage_pipeline,
)
from empress.handlers.base import command_handler, parse_json_array, parse_json_object

# ========================================
# Distinct listings
# ========================================


@command_handler("listVerbs")
def list_verbs(gateway: StatementGateway) -> CommandResult:
    verbs = gateway.distinct("verb.id")
    return CommandResult.success("listVerbs", f"{len(verbs)} unique verbs", data=verbs)


@command_handler("listActors")
def list_actors(gateway: StatementGateway) -> CommandResult:
    # mbox identifies an actor
    actors = gateway.distinct("actor.mbox")
    return CommandResult.success("listActors", f"{len(actors)} unique actors", data=actors)


@command_handler("list-object-types")
def list_object_types(gateway: StatementGateway) -> CommandResult:
    types = gateway.distinct("object.objectType")
    return CommandResult.success("list-object-types", "Object Types:", data=types)


@command_handler("list-all-extensions")
def list_all_extensions(gateway: StatementGateway) -> CommandResult:
    extensions = gateway.distinct("object.extensions")
    return CommandResult.success("list-all-extensions", "Extensions:", data=extensions)


# ========================================
# Counts & aggregations
# ========================================


@command_handler("lrsStats")
def lrs_stats(gateway: StatementGateway) -> CommandResult:
    count = gateway.count_all()
    return CommandResult.success(
        "lrsStats", f"Total statements in LRS: {count}", data={"total_statements": count}
    )


@command_handler("aggregate")
def aggregate(gateway: StatementGateway, pipeline: str) -> CommandResult:
    """Run a caller-supplied pipeline as-is."""
    stages = parse_json_array(pipeline, "pipeline")
    results = gateway.aggregate(stages)
    return CommandResult.success("aggregate", f"{len(results)} results", data=results)


@command_handler("groupByDate")
def group_by_date(gateway: StatementGateway, filter: str, granularity: str) -> CommandResult:
    """Statement counts per year, month, day or hour."""
    try:
        pipeline = group_by_date_pipeline(parse_json_object(filter), granularity)
    except ValueError as exc:
        raise MalformedInput(str(exc)) from exc
    results = gateway.aggregate(pipeline)
    return CommandResult.success(
        "groupByDate", f"Statements grouped by {granularity.lower()}", data=results
    )


@command_handler("avgScoreByActivity")
def avg_score_by_activity(gateway: StatementGateway, activity_id: str) -> CommandResult:
    """
    Average scaled score for an activity.

    ``data`` is None when no statement about the activity carries a score.
    ``$avg`` yields a null average, not an empty result, when statements
    exist but none is scored.
    """
    rows = gateway.aggregate(average_score_pipeline(activity_id))
    if not rows or rows[0].get("avgScore") is None:
        return CommandResult.success(
            "avgScoreByActivity", f"No scored statements found for activity {activity_id}", data=None
        )
    average = rows[0].get("avgScore")
    return CommandResult.success(
        "avgScoreByActivity", f"Average score for {activity_id}: {average}", data=average
    )


@command_handler("most-active-actors")
def most_active_actors(gateway: StatementGateway) -> CommandResult:
    actors = gateway.aggregate(most_active_actors_pipeline())
    return CommandResult.success("most-active-actors", "Most Active Actors:", data=actors)


@command_handler("visualize-verb-usage")
def visualize_verb_usage(gateway: StatementGateway) -> CommandResult:
    usage = gateway.aggregate(verb_usage_pipeline({}))
    return CommandResult.success("visualize-verb-usage", "Verb Usage:", data=usage)
