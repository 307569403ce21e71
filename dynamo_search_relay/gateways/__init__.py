"""Document store and message queue gateways."""

from dynamo_search_relay.gateways.opensearch_gateway import (
    OpenSearchIndexingGateway,
    build_search_body,
)
from dynamo_search_relay.gateways.protocols import (
    AcknowledgementGateway,
    IndexingGateway,
)
from dynamo_search_relay.gateways.sqs_gateway import SQSAcknowledgementGateway

__all__ = [
    "AcknowledgementGateway",
    "IndexingGateway",
    "OpenSearchIndexingGateway",
    "SQSAcknowledgementGateway",
    "build_search_body",
]
