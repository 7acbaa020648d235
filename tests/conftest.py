"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
No test needs a running MongoDB: handlers get an in-memory FakeGateway,
and the gateway itself is tested against a mocked pymongo client.
"""
import copy
import sys
from pathlib import Path
from typing import Any

import pytest
from bson import ObjectId

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


def _lookup(document: dict, path: str) -> Any:
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


class FakeGateway:
    """
    In-memory stand-in for StatementGateway.

    Supports equality filters on dotted paths; every call is recorded in
    ``calls`` so tests can assert which operation a handler performed.
    """

    def __init__(self, documents: list[dict] | None = None):
        self.documents: list[dict] = []
        self.registries: dict[str, list[dict]] = {}
        self.calls: list[tuple[str, Any]] = []
        self.aggregate_result: list[dict] = []
        self.stats = {"storageSize": 1024, "objects": 0}
        self.disconnected = False
        for document in documents or []:
            self._store(document)

    def _store(self, document: dict) -> None:
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))

    def _matches(self, document: dict, filter: dict) -> bool:
        return all(_lookup(document, key) == value for key, value in filter.items())

    def connect(self) -> None:
        self.calls.append(("connect", None))

    def disconnect(self) -> None:
        self.disconnected = True

    def insert_one(self, record: dict) -> int:
        self.calls.append(("insert_one", record))
        self._store(record)
        return 1

    def insert_many(self, records: list[dict]) -> int:
        self.calls.append(("insert_many", records))
        for record in records:
            self._store(record)
        return len(records)

    def insert_into(self, collection_name: str, document: dict) -> int:
        self.calls.append(("insert_into", (collection_name, document)))
        self.registries.setdefault(collection_name, []).append(dict(document))
        return 1

    def update_one(self, match: dict, patch: dict) -> int:
        self.calls.append(("update_one", (match, patch)))
        for document in self.documents:
            if self._matches(document, match):
                document.update(patch)
                return 1
        return 0

    def delete_all(self) -> int:
        self.calls.append(("delete_all", None))
        deleted = len(self.documents)
        self.documents = []
        return deleted

    def find(self, filter: dict, sort: list | None = None) -> list[dict]:
        self.calls.append(("find", (filter, sort)))
        if any(key.startswith("$") or isinstance(value, dict) for key, value in filter.items()):
            return []
        return [copy.deepcopy(d) for d in self.documents if self._matches(d, filter)]

    def aggregate(self, pipeline: list[dict]) -> list[dict]:
        self.calls.append(("aggregate", pipeline))
        return self.aggregate_result

    def distinct(self, field_path: str) -> list[Any]:
        self.calls.append(("distinct", field_path))
        values: list[Any] = []
        for document in self.documents:
            value = _lookup(document, field_path)
            if value is not None and value not in values:
                values.append(value)
        return values

    def distinct_in(self, collection_name: str, field_path: str) -> list[Any]:
        self.calls.append(("distinct_in", (collection_name, field_path)))
        return [d[field_path] for d in self.registries.get(collection_name, []) if field_path in d]

    def count_all(self) -> int:
        self.calls.append(("count_all", None))
        return len(self.documents)

    def stats_summary(self) -> dict:
        self.calls.append(("stats_summary", None))
        return dict(self.stats)

    def operations(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def sample_statement():
    """Provide a valid xAPI statement for testing."""
    return {
        "actor": {"name": "John", "mbox": "mailto:john@x.com"},
        "verb": {
            "id": "http://adlnet.gov/expapi/verbs/completed",
            "display": {"en-US": "completed"},
        },
        "object": {"objectType": "Activity", "name": "Course", "id": "http://example.com/course"},
    }


@pytest.fixture
def fake_gateway():
    """Provide an empty in-memory gateway."""
    return FakeGateway()


@pytest.fixture
def env_settings(monkeypatch, tmp_path):
    """Required environment variables set, cwd moved to a temp dir."""
    from config import get_settings

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MONGO_URI", "mongodb://localhost:27017")
    monkeypatch.setenv("DB_NAME", "lrs")
    monkeypatch.setenv("COLLECTION_NAME", "statements")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def gateway_factory():
    """Provide the FakeGateway class for tests that need several gateways."""
    return FakeGateway
