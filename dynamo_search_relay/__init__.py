"""
DynamoDB stream to OpenSearch relay.

This package parses stream records delivered through SQS, flattens them into
documents, upserts them into per-table OpenSearch indices and acknowledges
the messages, and purges documents past their retention window.
"""

__version__ = "0.1.0"

from dynamo_search_relay.config import RelayConfig, load_config
from dynamo_search_relay.exceptions import (
    AcknowledgementError,
    ConfigurationError,
    EmptyRecordError,
    GatewayError,
    IndexingError,
    InvalidRecordFormatError,
    MissingPrimaryKeyError,
    NoChannelForTableError,
    RecordFormatError,
    RelayError,
    RoutingError,
    TableNameExtractionError,
)
from dynamo_search_relay.gateways import (
    AcknowledgementGateway,
    IndexingGateway,
    OpenSearchIndexingGateway,
    SQSAcknowledgementGateway,
)
from dynamo_search_relay.models import (
    BatchResult,
    ChangeEvent,
    LambdaResponse,
    MessageOutcome,
    MessageState,
    PurgeResult,
    RoutingTarget,
)
from dynamo_search_relay.parsing import (
    flatten_record,
    parse_envelope,
    unmarshall_image,
)
from dynamo_search_relay.processor import EventProcessor
from dynamo_search_relay.purge import PurgeEngine, compute_purge_cutoff
from dynamo_search_relay.routing import extract_table_name, route

__all__ = [
    "__version__",
    "AcknowledgementError",
    "AcknowledgementGateway",
    "BatchResult",
    "ChangeEvent",
    "ConfigurationError",
    "EmptyRecordError",
    "EventProcessor",
    "GatewayError",
    "IndexingError",
    "IndexingGateway",
    "InvalidRecordFormatError",
    "LambdaResponse",
    "MessageOutcome",
    "MessageState",
    "MissingPrimaryKeyError",
    "NoChannelForTableError",
    "OpenSearchIndexingGateway",
    "PurgeEngine",
    "PurgeResult",
    "RecordFormatError",
    "RelayConfig",
    "RelayError",
    "RoutingError",
    "RoutingTarget",
    "SQSAcknowledgementGateway",
    "TableNameExtractionError",
    "compute_purge_cutoff",
    "extract_table_name",
    "flatten_record",
    "load_config",
    "parse_envelope",
    "route",
    "unmarshall_image",
]
