"""
Event processor relaying DynamoDB stream records from SQS into OpenSearch.

Each message moves through ``received -> parsed -> flattened -> routed ->
indexed -> acknowledged``, or stops at ``failed``. A message is deleted from
its queue only after OpenSearch confirmed the write, so a crash in between
leads to a redelivery and a repeated upsert, never a lost change.

Messages are isolated from one another: a failure is logged and the batch
moves on. Nothing raised while handling a message escapes ``process``.
"""

# pylint: disable=broad-exception-caught

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from dynamo_search_relay.exceptions import AcknowledgementError
from dynamo_search_relay.gateways.protocols import (
    AcknowledgementGateway,
    IndexingGateway,
)
from dynamo_search_relay.models import (
    BatchResult,
    MessageOutcome,
    MessageState,
)
from dynamo_search_relay.parsing import (
    flatten_record,
    parse_envelope,
    require_primary_key,
)
from dynamo_search_relay.routing import route
from dynamo_search_relay.stream_types import (
    MetricsRecorder,
    SearchParams,
    SQSEvent,
    SQSRecord,
)
from dynamo_search_relay.utils.timestamps import utc_now

logger = logging.getLogger(__name__)


def _batch_records(
    batch: Optional[SQSEvent | Mapping[str, Any] | Iterable[SQSRecord]],
) -> list[SQSRecord]:
    """Accept either a Lambda SQS event or a plain sequence of messages."""
    if batch is None:
        return []
    if isinstance(batch, Mapping):
        records = batch.get("Records") or []
        if not isinstance(records, (list, tuple)):
            logger.warning(
                "Ignoring batch with non-list Records",
                extra={"records_type": type(records).__name__},
            )
            return []
        return list(records)
    return list(batch)


class EventProcessor:
    """Relays queued change records into their destination indices."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        indexing: IndexingGateway,
        acknowledgement: AcknowledgementGateway,
        queue_urls: Sequence[str],
        metrics: Optional[MetricsRecorder] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._indexing = indexing
        self._acknowledgement = acknowledgement
        self._queue_urls = tuple(queue_urls)
        self._metrics = metrics
        self._clock = clock

    @property
    def queue_urls(self) -> tuple[str, ...]:
        """Queue URLs messages can be acknowledged on."""
        return self._queue_urls

    def _count(
        self,
        name: str,
        value: int = 1,
        dimensions: Optional[Mapping[str, str]] = None,
    ) -> None:
        if self._metrics:
            self._metrics.count(name, value, dimensions)

    def process(
        self,
        batch: Optional[SQSEvent | Mapping[str, Any] | Iterable[SQSRecord]],
    ) -> BatchResult:
        """
        Index and acknowledge every message of an SQS batch.

        Never raises; failed messages stay on their queue for redelivery.
        """
        records = _batch_records(batch)
        if not records:
            logger.info("No records to process")
            return BatchResult()

        self._count("MessagesReceived", len(records))
        outcomes = tuple(self._process_message(record) for record in records)
        result = BatchResult(outcomes=outcomes)

        logger.info(
            "Batch processing completed",
            extra={
                "received": result.received,
                "acknowledged": result.acknowledged,
                "failed_message_ids": result.failed_message_ids,
            },
        )
        return result

    def _process_message(self, record: SQSRecord) -> MessageOutcome:
        if not isinstance(record, Mapping):
            logger.error(
                "Skipping malformed SQS record",
                extra={"record_type": type(record).__name__},
            )
            self._count(
                "MessageProcessingFailed", 1, {"error_type": "MalformedRecord"}
            )
            return MessageOutcome(
                message_id="unknown",
                state=MessageState.FAILED,
                error="SQS record is not an object",
            )

        message_id = str(record.get("messageId", "unknown"))
        state = MessageState.RECEIVED
        table_name: Optional[str] = None

        try:
            logger.info(
                "Processing SQS record", extra={"message_id": message_id}
            )

            event = parse_envelope(record.get("body", ""))
            if event is None:
                logger.error(
                    "Skipping record - could not parse DynamoDB event",
                    extra={"message_id": message_id},
                )
                self._count("EnvelopeParseMiss")
                return MessageOutcome(
                    message_id=message_id,
                    state=MessageState.FAILED,
                    error="No DynamoDB event found in message body",
                )
            state = MessageState.PARSED

            document = flatten_record(event, now=self._clock())
            doc_id = require_primary_key(document)
            state = MessageState.FLATTENED

            target = route(event.origin_table_ref, self._queue_urls)
            table_name = target.destination_index
            state = MessageState.ROUTED

            saved = self._indexing.create(
                target.destination_index, doc_id, document
            )
            if not saved:
                logger.error(
                    "Index write not confirmed, leaving message on queue",
                    extra={"message_id": message_id, "table": table_name},
                )
                return MessageOutcome(
                    message_id=message_id,
                    state=MessageState.FAILED,
                    table_name=table_name,
                    error="Index write not confirmed",
                )
            state = MessageState.INDEXED
            self._count("RecordsIndexed", 1, {"index": table_name})

            receipt_handle = record.get("receiptHandle")
            if not receipt_handle:
                raise AcknowledgementError("Message has no receipt handle")
            self._acknowledgement.delete(target.ack_channel, receipt_handle)
            state = MessageState.ACKNOWLEDGED
            self._count("MessagesAcknowledged", 1, {"index": table_name})

        except Exception as exc:
            logger.exception(
                "Failed to process individual record",
                extra={
                    "message_id": message_id,
                    "table": table_name,
                    "last_state": state.value,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            self._count(
                "MessageProcessingFailed",
                1,
                {"error_type": type(exc).__name__},
            )
            return MessageOutcome(
                message_id=message_id,
                state=MessageState.FAILED,
                table_name=table_name,
                error=str(exc),
            )

        return MessageOutcome(
            message_id=message_id, state=state, table_name=table_name
        )

    def search(
        self, table_name: str, params: Optional[SearchParams] = None
    ) -> list[dict[str, Any]]:
        """Search the index of ``table_name``; errors propagate."""
        return self._indexing.search(table_name.lower(), params or {})

    def get(self, table_name: str, doc_id: str) -> Optional[dict[str, Any]]:
        """Fetch one document from the index of ``table_name``."""
        return self._indexing.get(table_name.lower(), doc_id)

    def delete(self, table_name: str, doc_id: str) -> None:
        """Delete one document from the index of ``table_name``."""
        self._indexing.delete(table_name.lower(), doc_id)


__all__ = ["EventProcessor"]
