"""Database layer: the MongoDB gateway and the aggregation pipelines it runs."""

from empress.db.gateway import StatementGateway, gateway_scope

__all__ = ["StatementGateway", "gateway_scope"]
