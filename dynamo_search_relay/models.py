"""
Data models for relaying DynamoDB stream records into OpenSearch.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from dynamo_search_relay.stream_types import DynamoDBImage

# Flattened document written to the destination index
FlatRecord = dict[str, Any]


class MessageState(str, Enum):
    """Processing states a queue message moves through."""

    RECEIVED = "received"
    PARSED = "parsed"
    FLATTENED = "flattened"
    ROUTED = "routed"
    INDEXED = "indexed"
    ACKNOWLEDGED = "acknowledged"
    FAILED = "failed"


@dataclass(frozen=True)
class ChangeEvent:  # pylint: disable=too-many-instance-attributes
    """A single DynamoDB change as carried by a stream record."""

    origin_id: str
    event_kind: str
    event_source: str
    region: Optional[str]
    origin_table_ref: str
    key_attributes: DynamoDBImage
    new_image: Optional[DynamoDBImage]
    old_image: Optional[DynamoDBImage] = None

    @classmethod
    def from_stream_record(cls, record: Mapping[str, Any]) -> "ChangeEvent":
        """Build from a record that already passed the shape check."""
        dynamodb = record["dynamodb"]
        return cls(
            origin_id=record["eventID"],
            event_kind=record["eventName"],
            event_source=record["eventSource"],
            region=record.get("awsRegion"),
            origin_table_ref=record["eventSourceARN"],
            key_attributes=dynamodb.get("Keys") or {},
            new_image=dynamodb.get("NewImage"),
            old_image=dynamodb.get("OldImage"),
        )


@dataclass(frozen=True)
class RoutingTarget:
    """Where a change record is written and which queue it is acked on."""

    destination_index: str
    ack_channel: str


@dataclass(frozen=True)
class MessageOutcome:
    """Final state of one queue message within an invocation."""

    message_id: str
    state: MessageState
    table_name: Optional[str] = None
    error: Optional[str] = None

    @property
    def acknowledged(self) -> bool:
        """True when the message was indexed and removed from its queue."""
        return self.state is MessageState.ACKNOWLEDGED


@dataclass(frozen=True)
class BatchResult:
    """Summary of one ``EventProcessor.process`` call."""

    outcomes: tuple[MessageOutcome, ...] = field(default_factory=tuple)

    @property
    def received(self) -> int:
        """Number of messages in the batch."""
        return len(self.outcomes)

    @property
    def acknowledged(self) -> int:
        """Number of messages indexed and acknowledged."""
        return sum(1 for outcome in self.outcomes if outcome.acknowledged)

    @property
    def failed_message_ids(self) -> list[str]:
        """Ids of messages left on their queue for redelivery."""
        return [
            outcome.message_id
            for outcome in self.outcomes
            if not outcome.acknowledged
        ]


@dataclass(frozen=True)
class PurgeResult:
    """Summary of one ``PurgeEngine.purge`` call."""

    cutoff: str
    purged: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()


@dataclass(frozen=True)
class LambdaResponse:
    """Response structure for Lambda handlers."""

    status_code: int
    processed_records: int
    acknowledged_records: int

    def to_dict(self) -> dict[str, int]:
        """Convert to AWS Lambda-compatible dictionary."""
        return {
            "statusCode": self.status_code,
            "processed_records": self.processed_records,
            "acknowledged_records": self.acknowledged_records,
        }


__all__ = [
    "BatchResult",
    "ChangeEvent",
    "FlatRecord",
    "LambdaResponse",
    "MessageOutcome",
    "MessageState",
    "PurgeResult",
    "RoutingTarget",
]
