"""
Centralized aggregation pipelines.

Every report command is a single aggregation round trip; the pipelines
it sends are built here so they can be inspected and tested without a
database.

Usage:
    from empress.db.pipelines import average_score_pipeline

    rows = gateway.aggregate(average_score_pipeline(activity_id))
"""

from __future__ import annotations

from typing import Any

# Date parts used by group_by_date_pipeline, coarsest first
DATE_PARTS = {
    "year": ("year",),
    "month": ("year", "month"),
    "day": ("year", "month", "day"),
    "hour": ("year", "month", "day", "hour"),
}

_DATE_OPERATORS = {
    "year": "$year",
    "month": "$month",
    "day": "$dayOfMonth",
    "hour": "$hour",
}

DEFAULT_GRANULARITY = "day"

# Temporary field holding the converted timestamp
BUCKET_FIELD = "_bucketTime"


def group_by_date_pipeline(
    filter: dict[str, Any] | None = None,
    granularity: str = DEFAULT_GRANULARITY,
) -> list[dict[str, Any]]:
    """
    Count statements per calendar bucket.

    ``timestamp`` is converted to a date so both BSON dates and ISO 8601
    strings (the xAPI wire format) can be grouped. Statements whose
    timestamp cannot be converted are left out of the counts.
    """
    granularity = granularity.lower()
    if granularity not in DATE_PARTS:
        raise ValueError(
            f"Unknown granularity '{granularity}' (expected one of: {', '.join(DATE_PARTS)})"
        )

    bucket = f"${BUCKET_FIELD}"
    group_id = {part: {_DATE_OPERATORS[part]: bucket} for part in DATE_PARTS[granularity]}
    sort = {f"_id.{part}": 1 for part in DATE_PARTS[granularity]}

    return [
        {"$match": filter or {}},
        {"$addFields": {BUCKET_FIELD: {"$convert": {
            "input": "$timestamp", "to": "date", "onError": None, "onNull": None,
        }}}},
        {"$match": {BUCKET_FIELD: {"$ne": None}}},
        {"$group": {"_id": group_id, "count": {"$sum": 1}}},
        {"$sort": sort},
    ]


def average_score_pipeline(activity_id: str) -> list[dict[str, Any]]:
    """Average ``result.score.scaled`` over statements about one activity."""
    return [
        {"$match": {"object.id": activity_id}},
        {"$group": {"_id": None, "avgScore": {"$avg": "$result.score.scaled"}}},
    ]


def most_active_actors_pipeline() -> list[dict[str, Any]]:
    """Statement counts per actor mailbox, busiest first."""
    return [
        {"$group": {"_id": "$actor.mbox", "count": {"$sum": 1}}},
        {"$sort": {"count": -1}},
    ]


def verb_usage_pipeline(filter: dict[str, Any] | None = None) -> list[dict[str, Any]]:
    """Statement counts per verb id, most used first."""
    return [
        {"$match": filter or {}},
        {"$group": {"_id": "$verb.id", "count": {"$sum": 1}}},
        {"$sort": {"count": -1}},
    ]
