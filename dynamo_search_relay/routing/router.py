"""
Routing of change records to their destination index and source queue.

Each source table has its own SQS queue, and the queue URL contains the
table name. The destination index is the lowercased table name.
"""

import logging
import re
from typing import Optional, Sequence

from dynamo_search_relay.constants import TABLE_NAME_PATTERN
from dynamo_search_relay.exceptions import (
    NoChannelForTableError,
    TableNameExtractionError,
)
from dynamo_search_relay.models import RoutingTarget

logger = logging.getLogger(__name__)

_TABLE_NAME_RE = re.compile(TABLE_NAME_PATTERN)


def extract_table_name(event_source_arn: Optional[str]) -> str:
    """
    Extract the lowercased table name from a stream ARN.

    Raises:
        TableNameExtractionError: If the ARN is empty or has no table segment
    """
    if not event_source_arn:
        raise TableNameExtractionError("eventSourceARN is empty")

    match = _TABLE_NAME_RE.search(event_source_arn)
    if not match:
        logger.error(
            "Failed to extract table name from ARN",
            extra={
                "event_source_arn": event_source_arn,
                "length": len(event_source_arn),
            },
        )
        raise TableNameExtractionError(
            "Could not extract table name from eventSourceARN: "
            + event_source_arn
        )

    return match.group(1).lower()


def resolve_channel(table_name: str, channels: Sequence[str]) -> str:
    """
    Return the first queue URL that contains the table name.

    Matching is case-insensitive.

    Raises:
        NoChannelForTableError: If no queue URL matches
    """
    needle = table_name.lower()
    for channel in channels:
        if needle in channel.lower():
            return channel

    raise NoChannelForTableError(
        f"No queue URL found for table '{table_name}'"
    )


def route(event_source_arn: str, channels: Sequence[str]) -> RoutingTarget:
    """
    Resolve the destination index and ack queue for a change record.

    Raises:
        TableNameExtractionError: If the ARN has no table segment
        NoChannelForTableError: If no queue URL matches the table
    """
    table_name = extract_table_name(event_source_arn)
    return RoutingTarget(
        destination_index=table_name,
        ack_channel=resolve_channel(table_name, channels),
    )


__all__ = ["extract_table_name", "resolve_channel", "route"]
