"""
Construction of the processor and purge engine from configuration.

Lambdas build these once at cold start and pass them to the handlers.
"""

import logging
from typing import Optional

import boto3
from opensearchpy import AWSV4SignerAuth, OpenSearch, RequestsHttpConnection

from dynamo_search_relay.config import RelayConfig, load_config
from dynamo_search_relay.exceptions import ConfigurationError
from dynamo_search_relay.gateways import (
    OpenSearchIndexingGateway,
    SQSAcknowledgementGateway,
)
from dynamo_search_relay.processor import EventProcessor
from dynamo_search_relay.purge import PurgeEngine
from dynamo_search_relay.stream_types import MetricsRecorder
from dynamo_search_relay.utils.logging import configure_logging

logger = logging.getLogger(__name__)


def _host(endpoint: str) -> str:
    for scheme in ("https://", "http://"):
        if endpoint.startswith(scheme):
            endpoint = endpoint[len(scheme) :]
    return endpoint.rstrip("/")


def build_opensearch_client(
    config: RelayConfig, session: Optional[boto3.session.Session] = None
) -> OpenSearch:
    """
    Create an OpenSearch client signing requests with IAM credentials.

    Raises:
        ConfigurationError: If no AWS credentials can be resolved
    """
    session = session or boto3.session.Session()
    credentials = session.get_credentials()
    if credentials is None:
        raise ConfigurationError("No AWS credentials available")

    logger.info(
        "Initializing OpenSearch client with IAM authentication",
        extra={
            "region": config.region,
            "endpoint": config.opensearch_endpoint,
        },
    )
    return OpenSearch(
        hosts=[{"host": _host(config.opensearch_endpoint), "port": 443}],
        http_auth=AWSV4SignerAuth(credentials, config.region, "es"),
        use_ssl=True,
        verify_certs=True,
        connection_class=RequestsHttpConnection,
    )


def bootstrap_event_processor(
    config: Optional[RelayConfig] = None,
    metrics: Optional[MetricsRecorder] = None,
) -> EventProcessor:
    """Build an EventProcessor wired to OpenSearch and SQS."""
    config = config or load_config()
    configure_logging(config.log_level, config.structured_logging)

    return EventProcessor(
        indexing=OpenSearchIndexingGateway(build_opensearch_client(config)),
        acknowledgement=SQSAcknowledgementGateway(
            boto3.client("sqs", region_name=config.region)
        ),
        queue_urls=config.queue_urls,
        metrics=metrics,
    )


def bootstrap_purge_engine(
    config: Optional[RelayConfig] = None,
    metrics: Optional[MetricsRecorder] = None,
) -> PurgeEngine:
    """
    Build a PurgeEngine for the configured indices.

    Raises:
        ConfigurationError: If TABLES was not configured
    """
    config = config or load_config()
    configure_logging(config.log_level, config.structured_logging)

    return PurgeEngine(
        indexing=OpenSearchIndexingGateway(build_opensearch_client(config)),
        indices=config.require_purge_indices(),
        metrics=metrics,
    )


__all__ = [
    "bootstrap_event_processor",
    "bootstrap_purge_engine",
    "build_opensearch_client",
]
