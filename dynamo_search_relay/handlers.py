"""
Lambda handlers for processing, querying and purging.

The handlers receive a ready-built processor or purge engine; Lambda entry
points construct those once at cold start, e.g.::

    processor = bootstrap_event_processor()

    def lambda_handler(event, context):
        return handle_process_records(event, processor)
"""

import json
import logging
from typing import Any

from dynamo_search_relay.models import LambdaResponse
from dynamo_search_relay.processor import EventProcessor
from dynamo_search_relay.purge import PurgeEngine
from dynamo_search_relay.stream_types import (
    APIGatewayResponse,
    QueryEvent,
    SQSEvent,
)

logger = logging.getLogger(__name__)


def handle_process_records(
    event: SQSEvent, processor: EventProcessor
) -> dict[str, int]:
    """Relay an SQS batch of stream records into OpenSearch."""
    records = event.get("Records")
    logger.info(
        "Processing SQS records handler",
        extra={
            "record_count": len(records) if isinstance(records, list) else 0
        },
    )
    result = processor.process(event)
    return LambdaResponse(
        status_code=200,
        processed_records=result.received,
        acknowledged_records=result.acknowledged,
    ).to_dict()


def handle_purge_records(engine: PurgeEngine) -> dict[str, Any]:
    """Purge expired documents from every configured index."""
    logger.info("Purge records handler started")
    result = engine.purge()
    return {
        "statusCode": 200,
        "cutoff": result.cutoff,
        "purged": list(result.purged),
        "failed": list(result.failed),
    }


def handle_query(
    event: QueryEvent, processor: EventProcessor
) -> APIGatewayResponse:
    """
    Search the index of ``event["tableName"]`` with ``event["query"]``.

    An empty ``query`` object is a valid request and matches everything.
    """
    query = event.get("query")
    if query is None:
        logger.warning(
            "No query in body provided in request",
            extra={"event_keys": list(event.keys())},
        )
        return {"statusCode": 400, "body": json.dumps({"message": "No body"})}

    table_name = event.get("tableName")
    if not table_name:
        return {
            "statusCode": 400,
            "body": json.dumps({"message": "No tableName"}),
        }

    results = processor.search(table_name, query)
    return {"statusCode": 200, "body": json.dumps(results, default=str)}


__all__ = ["handle_process_records", "handle_purge_records", "handle_query"]
