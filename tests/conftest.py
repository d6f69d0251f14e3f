"""
Global pytest fixtures for the urlshort test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide an isolated in-memory Storage for direct testing
    - Provide a ShorteningEngine wired to the Storage fixture
    - Provide a recording store double for engine-level call assertions

Why an app factory?
    Using `create_app()` with an injected Storage gives every test fresh
    in-memory state, eliminating cross-test flakiness.
"""

from decimal import Decimal
from typing import List, Optional

import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient

from main import create_app
from urlshort.engine.shortening_engine import ShorteningEngine
from urlshort.models import UrlMapping
from urlshort.storage.storage import Storage


def _client_error(code, op):
    return ClientError({"Error": {"Code": code, "Message": code}}, op)


class FakeTable:
    """Table double mimicking the boto3 DynamoDB Table calls DynamoStorage makes."""

    def __init__(self, page_size=2):
        self.items = {}
        self.page_size = page_size
        self.scan_calls = []
        self.update_calls = []
        self.put_calls = []
        self.consistent_reads = []
        self.fail = None

    def _maybe_fail(self):
        if self.fail is not None:
            raise self.fail

    def scan(self, FilterExpression, ExclusiveStartKey=None, ConsistentRead=False):
        self._maybe_fail()
        self.consistent_reads.append(("Scan", ConsistentRead))
        self.scan_calls.append(ExclusiveStartKey)
        keys = sorted(self.items)
        start = keys.index(ExclusiveStartKey["short_url"]) + 1 if ExclusiveStartKey else 0
        page = keys[start:start + self.page_size]
        # Attr("original_url").eq(value) -> values exposed via get_expression()
        expected = FilterExpression.get_expression()["values"][1]
        matched = [self.items[k] for k in page if self.items[k].get("original_url") == expected]
        resp = {"Items": matched, "Count": len(matched)}
        if start + self.page_size < len(keys):
            resp["LastEvaluatedKey"] = {"short_url": page[-1]}
        return resp

    def get_item(self, Key, ConsistentRead=False):
        self._maybe_fail()
        self.consistent_reads.append(("GetItem", ConsistentRead))
        item = self.items.get(Key["short_url"])
        return {"Item": dict(item)} if item else {}

    def update_item(self, Key, UpdateExpression, ExpressionAttributeValues, ReturnValues):
        self._maybe_fail()
        self.update_calls.append((Key, UpdateExpression, ExpressionAttributeValues, ReturnValues))
        item = self.items.setdefault(Key["short_url"], dict(Key))
        current = item.get("counter_value", ExpressionAttributeValues[":floor"])
        item["counter_value"] = Decimal(current) + ExpressionAttributeValues[":inc"]
        return {"Attributes": {"counter_value": item["counter_value"]}}

    def put_item(self, Item, ConditionExpression):
        self._maybe_fail()
        self.put_calls.append(Item)
        if Item["short_url"] in self.items:
            raise _client_error("ConditionalCheckFailedException", "PutItem")
        self.items[Item["short_url"]] = {k: (Decimal(v) if k == "id" else v) for k, v in Item.items()}


class RecordingStorage(Storage):
    """In-memory Storage that records every contract call made on it."""

    def __init__(self, start: Optional[int] = 1):
        super().__init__(start=start)
        self.calls: List[str] = []

    def find_by_url(self, original_url: str) -> Optional[UrlMapping]:
        self.calls.append("find_by_url")
        return super().find_by_url(original_url)

    def find_by_token(self, token: str) -> Optional[UrlMapping]:
        self.calls.append("find_by_token")
        return super().find_by_token(token)

    def next_id(self) -> int:
        self.calls.append("next_id")
        return super().next_id()

    def insert(self, ident: int, token: str, original_url: str) -> None:
        self.calls.append("insert")
        super().insert(ident, token, original_url)


@pytest.fixture
def storage() -> Storage:
    """Fresh in-memory Storage whose counter starts at 1."""
    return Storage(start=1)


@pytest.fixture
def recording_storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture
def engine(storage: Storage) -> ShorteningEngine:
    """ShorteningEngine wired to the storage fixture."""
    return ShorteningEngine(storage=storage)


@pytest.fixture
def client(storage: Storage) -> TestClient:
    """
    Provide a fresh TestClient with a new app instance.

    Notes:
        - The app shares the `storage` fixture so tests can inspect persisted state.
    """
    app = create_app(storage=storage)
    return TestClient(app)


@pytest.fixture
def fake_table() -> FakeTable:
    return FakeTable()
