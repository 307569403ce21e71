"""
Capability interfaces for the document store and the message queue.

The processor only depends on these protocols, so the OpenSearch and SQS
adapters can be swapped for in-memory doubles in tests.
"""

from typing import Any, Mapping, Optional, Protocol

from dynamo_search_relay.stream_types import SearchParams


class IndexingGateway(Protocol):
    """Document store operations used by the relay."""

    def create(
        self, index: str, doc_id: str, document: Mapping[str, Any]
    ) -> bool:
        """Upsert ``document`` under ``doc_id``; return True on success."""
        ...

    def get(self, index: str, doc_id: str) -> Optional[dict[str, Any]]:
        """Return the stored document, or None when it does not exist."""
        ...

    def search(
        self, index: str, params: SearchParams
    ) -> list[dict[str, Any]]:
        """Return matching documents in result order."""
        ...

    def delete(self, index: str, doc_id: str) -> None:
        """Delete one document by id."""
        ...

    def delete_by_query(self, index: str, query: Mapping[str, Any]) -> None:
        """Delete every document matching ``query``."""
        ...


class AcknowledgementGateway(Protocol):
    """Message queue operations used by the relay."""

    def send(
        self,
        channel: str,
        body: str,
        attributes: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Send a message to the queue at ``channel``."""
        ...

    def delete(self, channel: str, receipt_token: str) -> None:
        """Remove a received message from the queue at ``channel``."""
        ...


__all__ = ["AcknowledgementGateway", "IndexingGateway"]
