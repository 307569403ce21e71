"""Shared fixtures for dynamo_search_relay tests."""

import json
from typing import Any, Callable, Mapping, Optional

import pytest
from dateutil.parser import isoparse

from dynamo_search_relay.exceptions import AcknowledgementError, IndexingError

ORDERS_ARN = (
    "arn:aws:dynamodb:us-east-1:123456789012:table/Orders/stream/"
    "2024-01-01T00:00:00.000"
)
QUEUE_URLS = (
    "https://sqs.us-east-1.amazonaws.com/123456789012/app-Orders-queue",
    "https://sqs.us-east-1.amazonaws.com/123456789012/app-Users-queue",
)


def pytest_configure(config: Any) -> None:
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


class MockMetrics:
    """Mock metrics recorder for testing."""

    def __init__(self) -> None:
        self.counts: list[tuple[str, int, Optional[Mapping[str, str]]]] = []

    def count(
        self,
        name: str,
        value: int,
        dimensions: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.counts.append((name, value, dimensions))

    def total(self, name: str) -> int:
        return sum(value for metric, value, _ in self.counts if metric == name)


class InMemoryIndexingGateway:
    """Dictionary-backed document store with upsert semantics."""

    def __init__(self, journal: Optional[list[tuple[str, ...]]] = None):
        self.indices: dict[str, dict[str, dict[str, Any]]] = {}
        self.journal = journal if journal is not None else []
        self.failing_indices: set[str] = set()
        self.confirm_writes = True
        self.queries: list[tuple[str, Mapping[str, Any]]] = []

    def _check(self, index: str) -> None:
        if index in self.failing_indices:
            raise IndexingError(f"index {index} unavailable")

    def create(
        self, index: str, doc_id: str, document: Mapping[str, Any]
    ) -> bool:
        self._check(index)
        self.journal.append(("create", index, doc_id))
        if not self.confirm_writes:
            return False
        self.indices.setdefault(index, {})[doc_id] = dict(document)
        return True

    def get(self, index: str, doc_id: str) -> Optional[dict[str, Any]]:
        self._check(index)
        return self.indices.get(index, {}).get(doc_id)

    def search(
        self, index: str, params: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        self._check(index)
        docs = list(self.indices.get(index, {}).values())
        start = params.get("from") or 0
        size = params.get("size")
        return docs[start : start + size] if size is not None else docs[start:]

    def delete(self, index: str, doc_id: str) -> None:
        self._check(index)
        self.indices.get(index, {}).pop(doc_id, None)

    def delete_by_query(self, index: str, query: Mapping[str, Any]) -> None:
        self._check(index)
        self.queries.append((index, query))
        ((field_name, bounds),) = query["range"].items()
        docs = self.indices.get(index, {})
        for doc_id in [
            key
            for key, doc in docs.items()
            if doc.get(field_name) is not None
            and isoparse(doc[field_name]) < isoparse(bounds["lt"])
        ]:
            del docs[doc_id]


class RecordingAcknowledgementGateway:
    """Queue double recording sends and deletes."""

    def __init__(self, journal: Optional[list[tuple[str, ...]]] = None):
        self.journal = journal if journal is not None else []
        self.deleted: list[tuple[str, str]] = []
        self.sent: list[tuple[str, str, Optional[Mapping[str, Any]]]] = []
        self.fail_deletes = False

    def send(
        self,
        channel: str,
        body: str,
        attributes: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.sent.append((channel, body, attributes))

    def delete(self, channel: str, receipt_token: str) -> None:
        if self.fail_deletes:
            raise AcknowledgementError("ReceiptHandleIsInvalid")
        self.journal.append(("ack", channel, receipt_token))
        self.deleted.append((channel, receipt_token))


@pytest.fixture
def mock_metrics() -> MockMetrics:
    """Provide a MockMetrics instance for testing."""
    return MockMetrics()


@pytest.fixture
def journal() -> list[tuple[str, ...]]:
    """Ordered log of store writes and queue acknowledgements."""
    return []


@pytest.fixture
def indexing(journal: list[tuple[str, ...]]) -> InMemoryIndexingGateway:
    return InMemoryIndexingGateway(journal)


@pytest.fixture
def acknowledgement(
    journal: list[tuple[str, ...]],
) -> RecordingAcknowledgementGateway:
    return RecordingAcknowledgementGateway(journal)


@pytest.fixture
def queue_urls() -> tuple[str, ...]:
    return QUEUE_URLS


@pytest.fixture
def make_stream_record() -> Callable[..., dict[str, Any]]:
    """Factory for DynamoDB stream records."""

    def _make(
        pk: str = "Product#X",
        event_id: str = "event-1",
        event_name: str = "INSERT",
        arn: str = ORDERS_ARN,
        new_image: Optional[dict[str, Any]] = None,
        include_new_image: bool = True,
        **extra_fields: Any,
    ) -> dict[str, Any]:
        image = (
            new_image
            if new_image is not None
            else {"pk": {"S": pk}, "price": {"N": "10"}}
        )
        dynamodb: dict[str, Any] = {
            "ApproximateCreationDateTime": 1704067200,
            "Keys": {"pk": {"S": pk}},
            "SequenceNumber": "111",
            "SizeBytes": 26,
            "StreamViewType": "NEW_AND_OLD_IMAGES",
        }
        if include_new_image:
            dynamodb["NewImage"] = image
        record = {
            "eventID": event_id,
            "eventName": event_name,
            "eventVersion": "1.1",
            "eventSource": "aws:dynamodb",
            "awsRegion": "us-east-1",
            "dynamodb": dynamodb,
            "eventSourceARN": arn,
        }
        record.update(extra_fields)
        return record

    return _make


@pytest.fixture
def make_sqs_message() -> Callable[..., dict[str, Any]]:
    """Factory for SQS messages whose body is the given payload."""

    def _make(
        payload: Any,
        message_id: str = "msg-1",
        receipt_handle: str = "receipt-1",
    ) -> dict[str, Any]:
        body = payload if isinstance(payload, str) else json.dumps(payload)
        return {
            "messageId": message_id,
            "receiptHandle": receipt_handle,
            "body": body,
            "eventSource": "aws:sqs",
        }

    return _make
