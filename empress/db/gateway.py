"""
MongoDB gateway for empress-cli.

Wraps a single pymongo client scoped to the configured database and
statement collection. The gateway never validates documents; callers do
that first. Filters and pipelines are passed to MongoDB verbatim.

Every pymongo/bson failure is re-raised as a DataStoreError subclass so
handlers only deal with the empress error taxonomy.
"""

from __future__ import annotations

from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from bson.errors import BSONError
from loguru import logger
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import ConfigurationError, ConnectionFailure, PyMongoError

from empress.core.errors import DataStoreConnectionError, QueryError

if TYPE_CHECKING:
    from config import Settings

# Fields reported by stats_summary(), taken from the dbstats command
STATS_FIELDS = ("db", "collections", "objects", "dataSize", "storageSize", "indexes", "indexSize")


class StatementGateway:
    """
    Data store gateway bound to one collection.

    The client is created lazily: the first operation connects, and
    disconnect() releases it. Both calls are idempotent.
    """

    def __init__(
        self,
        uri: str,
        db_name: str,
        collection_name: str,
        server_selection_timeout_ms: int = 5000,
        client_factory: type[MongoClient] | None = None,
    ) -> None:
        self.uri = uri
        self.db_name = db_name
        self.collection_name = collection_name
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self._client_factory = client_factory or MongoClient
        self._client: MongoClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> StatementGateway:
        return cls(
            uri=settings.mongo_uri,
            db_name=settings.db_name,
            collection_name=settings.collection_name,
            server_selection_timeout_ms=settings.server_selection_timeout_ms,
        )

    # ========================================
    # Connection lifecycle
    # ========================================

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def connect(self) -> None:
        """Open the client and ping the server. No-op when already connected."""
        if self._client is not None:
            return

        try:
            client = self._client_factory(
                self.uri,
                serverSelectionTimeoutMS=self.server_selection_timeout_ms,
            )
        except (ConfigurationError, ValueError) as exc:
            # pymongo raises a plain ValueError for some malformed URIs (e.g. a non-numeric port)
            raise DataStoreConnectionError(f"Invalid MongoDB configuration: {exc}") from exc

        try:
            client.admin.command("ping")
        except PyMongoError as exc:
            client.close()
            raise DataStoreConnectionError(f"Could not connect to MongoDB: {exc}") from exc

        self._client = client
        logger.debug("Connected to MongoDB: db={}, collection={}", self.db_name, self.collection_name)

    def disconnect(self) -> None:
        """Close the client if one is open."""
        if self._client is None:
            return
        self._client.close()
        self._client = None
        logger.debug("Disconnected from MongoDB")

    def __enter__(self) -> StatementGateway:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.disconnect()

    def _collection(self, name: str | None = None) -> Collection:
        self.connect()
        assert self._client is not None
        return self._client[self.db_name][name or self.collection_name]

    @contextmanager
    def _operation(self, action: str) -> Iterator[None]:
        """Translate driver failures raised while running one operation."""
        try:
            yield
        except ConnectionFailure as exc:
            raise DataStoreConnectionError(f"{action} failed, connection lost: {exc}") from exc
        except (PyMongoError, BSONError) as exc:
            raise QueryError(f"{action} failed: {exc}") from exc

    # ========================================
    # Writes
    # ========================================

    def insert_one(self, record: dict[str, Any]) -> int:
        with self._operation("insert_one"):
            self._collection().insert_one(record)
        return 1

    def insert_many(self, records: list[dict[str, Any]]) -> int:
        with self._operation("insert_many"):
            result = self._collection().insert_many(records)
        return len(result.inserted_ids)

    def insert_into(self, collection_name: str, document: dict[str, Any]) -> int:
        """Insert into a collection other than the statement collection (registries)."""
        with self._operation(f"insert into {collection_name}"):
            self._collection(collection_name).insert_one(document)
        return 1

    def update_one(self, match: dict[str, Any], patch: dict[str, Any]) -> int:
        """
        Apply ``$set`` with ``patch`` to the first document matching ``match``.

        Returns the matched count. Zero matches is not an error.
        """
        with self._operation("update_one"):
            result = self._collection().update_one(match, {"$set": patch})
        return result.matched_count

    def delete_all(self) -> int:
        """Delete every statement in the collection."""
        with self._operation("delete_many"):
            result = self._collection().delete_many({})
        return result.deleted_count

    # ========================================
    # Reads
    # ========================================

    def find(
        self,
        filter: dict[str, Any],
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        with self._operation("find"):
            cursor = self._collection().find(filter)
            if sort:
                cursor = cursor.sort(sort)
            return list(cursor)

    def aggregate(self, pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
        with self._operation("aggregate"):
            return list(self._collection().aggregate(pipeline))

    def distinct(self, field_path: str) -> list[Any]:
        with self._operation(f"distinct {field_path}"):
            return self._collection().distinct(field_path)

    def distinct_in(self, collection_name: str, field_path: str) -> list[Any]:
        with self._operation(f"distinct {field_path} in {collection_name}"):
            return self._collection(collection_name).distinct(field_path)

    def count_all(self) -> int:
        with self._operation("count_documents"):
            return self._collection().count_documents({})

    def stats_summary(self) -> dict[str, Any]:
        """Database statistics; always contains ``storageSize``."""
        with self._operation("dbstats"):
            self.connect()
            assert self._client is not None
            stats = self._client[self.db_name].command("dbstats")
        summary = {key: stats[key] for key in STATS_FIELDS if key in stats}
        summary.setdefault("storageSize", 0)
        return summary


@contextmanager
def gateway_scope(settings: Settings) -> Generator[StatementGateway, None, None]:
    """Provide a gateway that is always disconnected when the scope ends."""
    gateway = StatementGateway.from_settings(settings)
    try:
        yield gateway
    finally:
        gateway.disconnect()
