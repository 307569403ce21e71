"""
TypedDict definitions for DynamoDB stream records, SQS events and search
requests.

Provides type-safe structures for the payloads that cross the Lambda
boundary so the rest of the package can avoid raw ``Any``.
"""

from typing import Any, Literal, Mapping, Protocol, TypedDict

# =============================================================================
# DynamoDB Attribute Value Types
# =============================================================================

# A DynamoDB image maps attribute names to tagged values such as
# {"S": "value"} or {"N": "123"}.
DynamoDBImage = Mapping[str, Mapping[str, Any]]


# =============================================================================
# DynamoDB Stream Record Types
# =============================================================================


class StreamRecordDynamoDB(TypedDict, total=False):
    """The 'dynamodb' portion of a DynamoDB stream record."""

    ApproximateCreationDateTime: int
    Keys: dict[str, dict[str, Any]]
    NewImage: dict[str, dict[str, Any]]
    OldImage: dict[str, dict[str, Any]]
    SequenceNumber: str
    SizeBytes: int
    StreamViewType: Literal[
        "KEYS_ONLY", "NEW_IMAGE", "OLD_IMAGE", "NEW_AND_OLD_IMAGES"
    ]


class DynamoDBStreamRecord(TypedDict, total=False):
    """A single record from a DynamoDB stream."""

    eventID: str
    eventName: Literal["INSERT", "MODIFY", "REMOVE"]
    eventVersion: str
    eventSource: Literal["aws:dynamodb"]
    awsRegion: str
    dynamodb: StreamRecordDynamoDB
    eventSourceARN: str


# =============================================================================
# SQS Event Types
# =============================================================================


class SQSRecord(TypedDict, total=False):
    """A single message delivered to a Lambda by an SQS event source."""

    messageId: str
    receiptHandle: str
    body: str
    attributes: dict[str, str]
    messageAttributes: dict[str, Any]
    eventSource: str
    eventSourceARN: str
    awsRegion: str


class SQSEvent(TypedDict):
    """SQS event passed to Lambda handlers."""

    Records: list[SQSRecord]


# =============================================================================
# Search Types
# =============================================================================

# "from" is a keyword, hence the functional form.
SearchParams = TypedDict(
    "SearchParams",
    {
        "query": dict[str, Any],
        "sort": list[dict[str, Any]],
        "from": int,
        "size": int,
    },
    total=False,
)


class QueryEvent(TypedDict, total=False):
    """Payload accepted by the query Lambda."""

    tableName: str
    query: SearchParams


# =============================================================================
# Lambda Response Types
# =============================================================================


class APIGatewayResponse(TypedDict):
    """API Gateway-compatible Lambda response."""

    statusCode: int
    body: str


# =============================================================================
# Metrics Protocol
# =============================================================================


class MetricsRecorder(Protocol):  # pylint: disable=too-few-public-methods
    """Minimal protocol for metrics clients."""

    def count(
        self,
        name: str,
        value: int,
        dimensions: Mapping[str, str] | None = None,
    ) -> object:
        """Record a count metric."""
        return None


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "DynamoDBImage",
    "StreamRecordDynamoDB",
    "DynamoDBStreamRecord",
    "SQSRecord",
    "SQSEvent",
    "SearchParams",
    "QueryEvent",
    "APIGatewayResponse",
    "MetricsRecorder",
]
