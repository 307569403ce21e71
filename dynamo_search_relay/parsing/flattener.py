"""
Flattening of DynamoDB change events into OpenSearch documents.

The NewImage is unmarshalled from DynamoDB JSON into plain Python values and
merged with the provenance of the stream record, so each document carries
where and when it came from.
"""

import base64
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from boto3.dynamodb.types import Binary, TypeDeserializer

from dynamo_search_relay.constants import PRIMARY_KEY_FIELD
from dynamo_search_relay.exceptions import (
    EmptyRecordError,
    InvalidRecordFormatError,
    MissingPrimaryKeyError,
)
from dynamo_search_relay.models import ChangeEvent, FlatRecord
from dynamo_search_relay.stream_types import DynamoDBImage
from dynamo_search_relay.utils.timestamps import to_iso_z, utc_now

logger = logging.getLogger(__name__)


class _StreamDeserializer(TypeDeserializer):
    """TypeDeserializer that accepts base64 text for binary attributes.

    Stream records forwarded through SQS are JSON, so ``B`` values arrive as
    base64 strings rather than bytes.
    """

    def _deserialize_b(self, value: Any) -> Any:
        if isinstance(value, str):
            return value
        return super()._deserialize_b(value)


_deserializer = _StreamDeserializer()


def _normalize(value: Any) -> Any:
    """Convert deserialized DynamoDB values into JSON-friendly ones."""
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, Binary):
        return base64.b64encode(value.value).decode("ascii")
    if isinstance(value, (set, frozenset)):
        return sorted(_normalize(item) for item in value)
    if isinstance(value, list):
        return [_normalize(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize(item) for key, item in value.items()}
    return value


def unmarshall_image(image: DynamoDBImage) -> FlatRecord:
    """
    Deserialize a DynamoDB image from low-level client format to Python types.

    Numbers come back as ``int`` or ``float`` and sets as sorted lists.
    """
    return {
        name: _normalize(_deserializer.deserialize(dict(value)))
        for name, value in image.items()
    }


def flatten_record(
    event: ChangeEvent, now: Optional[datetime] = None
) -> FlatRecord:
    """
    Merge the unmarshalled NewImage with the event provenance fields.

    ``event_timestamp`` is the processing time, not the time of the change.

    Raises:
        InvalidRecordFormatError: If the record has no NewImage
        EmptyRecordError: If the merged record has no fields
    """
    if event.new_image is None:
        logger.error(
            "Invalid record format, missing dynamodb.NewImage",
            extra={
                "event_id": event.origin_id,
                "event_name": event.event_kind,
            },
        )
        raise InvalidRecordFormatError(
            "Invalid record format, missing dynamodb.NewImage"
        )

    result: FlatRecord = {
        **unmarshall_image(event.new_image),
        "event_id": event.origin_id,
        "event_name": event.event_kind,
        "event_source": event.event_source,
        "event_region": event.region,
        "event_timestamp": to_iso_z(now or utc_now()),
    }

    if not result:
        raise EmptyRecordError("No data to process after flattening")

    logger.info(
        "Successfully unmarshalled record",
        extra={"keys": list(result.keys()), "record_type": event.event_kind},
    )
    return result


def require_primary_key(record: Mapping[str, Any]) -> str:
    """
    Return the document id of a flattened record.

    Raises:
        MissingPrimaryKeyError: If ``pk`` is absent or empty
    """
    pk = record.get(PRIMARY_KEY_FIELD)
    if pk is None or pk == "":
        raise MissingPrimaryKeyError(
            f"Flattened record has no '{PRIMARY_KEY_FIELD}' value"
        )
    return str(pk)


__all__ = ["flatten_record", "require_primary_key", "unmarshall_image"]
