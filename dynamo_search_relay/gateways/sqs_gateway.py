"""
SQS implementation of the acknowledgement gateway.
"""

# pylint: disable=too-few-public-methods

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from botocore.exceptions import BotoCoreError, ClientError

from dynamo_search_relay.exceptions import AcknowledgementError
from dynamo_search_relay.gateways.errors import handle_gateway_errors

logger = logging.getLogger(__name__)

_SQS_ERRORS = (ClientError, BotoCoreError)


class SQSAcknowledgementGateway:
    """Send and delete messages on SQS queues."""

    def __init__(self, sqs_client: Any):
        self._sqs = sqs_client

    @handle_gateway_errors("send_message", _SQS_ERRORS, AcknowledgementError)
    def send(
        self,
        channel: str,
        body: str,
        attributes: Optional[Mapping[str, Any]] = None,
    ) -> None:
        request: dict[str, Any] = {"QueueUrl": channel, "MessageBody": body}
        if attributes:
            request["MessageAttributes"] = dict(attributes)
        self._sqs.send_message(**request)
        logger.info(
            "Successfully sent message to queue", extra={"queue_url": channel}
        )

    @handle_gateway_errors("delete_message", _SQS_ERRORS, AcknowledgementError)
    def delete(self, channel: str, receipt_token: str) -> None:
        self._sqs.delete_message(QueueUrl=channel, ReceiptHandle=receipt_token)
        logger.info(
            "Successfully deleted message from queue",
            extra={"queue_url": channel},
        )


__all__ = ["SQSAcknowledgementGateway"]
