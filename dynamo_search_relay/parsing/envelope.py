"""
Envelope parsing for SQS message bodies that carry DynamoDB stream records.

A record can arrive in three shapes, depending on how the table's stream is
piped into its queue:

- the stream record itself,
- the stream record JSON-encoded inside a ``body`` string,
- a ``Records`` array whose elements are either of the above.

The shapes are checked in that order and the first stream record found wins.
Anything else, including malformed JSON at any level, resolves to ``None``
so the caller can skip the message without raising.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from dynamo_search_relay.constants import (
    BODY_SNIPPET_LENGTH,
    DYNAMODB_EVENT_SOURCE,
)
from dynamo_search_relay.models import ChangeEvent

logger = logging.getLogger(__name__)


class EnvelopeKind(str, Enum):
    """How a stream record was wrapped inside a message body."""

    DIRECT = "direct"
    WRAPPED_IN_BODY = "wrapped_in_body"
    RECORDS_ARRAY = "records_array"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class ResolvedEnvelope:
    """Result of classifying a decoded message body."""

    kind: EnvelopeKind
    record: Optional[Mapping[str, Any]] = None


def is_stream_record(obj: object) -> bool:
    """Return True if ``obj`` has the shape of a DynamoDB stream record."""
    if not isinstance(obj, dict):
        return False
    return (
        isinstance(obj.get("eventID"), str)
        and isinstance(obj.get("eventName"), str)
        and obj.get("eventSource") == DYNAMODB_EVENT_SOURCE
        and isinstance(obj.get("eventSourceARN"), str)
        and isinstance(obj.get("dynamodb"), dict)
    )


def _unwrap_body(obj: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    """Decode a string ``body`` field and return it if it is a record.

    Raises:
        json.JSONDecodeError: If the body is not valid JSON
    """
    body = obj.get("body")
    if not isinstance(body, str):
        return None
    inner = json.loads(body)
    return inner if is_stream_record(inner) else None


def classify_envelope(parsed: object) -> ResolvedEnvelope:
    """
    Classify an already decoded message body.

    Raises:
        json.JSONDecodeError: If a nested ``body`` string is not valid JSON
    """
    if is_stream_record(parsed):
        return ResolvedEnvelope(
            EnvelopeKind.DIRECT, parsed  # type: ignore[arg-type]
        )

    if not isinstance(parsed, dict):
        return ResolvedEnvelope(EnvelopeKind.UNRECOGNIZED)

    inner = _unwrap_body(parsed)
    if inner is not None:
        return ResolvedEnvelope(EnvelopeKind.WRAPPED_IN_BODY, inner)

    records = parsed.get("Records")
    if isinstance(records, list):
        for element in records:
            if is_stream_record(element):
                return ResolvedEnvelope(EnvelopeKind.RECORDS_ARRAY, element)
            if isinstance(element, dict):
                inner = _unwrap_body(element)
                if inner is not None:
                    return ResolvedEnvelope(EnvelopeKind.RECORDS_ARRAY, inner)

    return ResolvedEnvelope(EnvelopeKind.UNRECOGNIZED)


def _snippet(raw_body: object) -> str:
    if isinstance(raw_body, str):
        return raw_body[:BODY_SNIPPET_LENGTH] + "..."
    return type(raw_body).__name__


def parse_envelope(raw_body: str) -> Optional[ChangeEvent]:
    """Extract the change event carried by an SQS message body."""
    try:
        parsed = json.loads(raw_body)
        resolved = classify_envelope(parsed)
    except (TypeError, ValueError, RecursionError) as exc:
        # json.JSONDecodeError is a ValueError; TypeError covers a non-str body
        # and RecursionError a body nested deeper than the decoder can go
        logger.error(
            "Failed to parse message body",
            extra={"error": str(exc), "body_snippet": _snippet(raw_body)},
        )
        return None

    if resolved.kind is EnvelopeKind.UNRECOGNIZED or resolved.record is None:
        logger.warning(
            "Could not find DynamoDB event in message",
            extra={
                "message_keys": (
                    list(parsed.keys())
                    if isinstance(parsed, dict)
                    else type(parsed).__name__
                ),
                "has_records": isinstance(parsed, dict)
                and isinstance(parsed.get("Records"), list),
            },
        )
        return None

    logger.debug(
        "Resolved DynamoDB event from message",
        extra={"envelope_kind": resolved.kind.value},
    )
    return ChangeEvent.from_stream_record(resolved.record)


__all__ = [
    "EnvelopeKind",
    "ResolvedEnvelope",
    "classify_envelope",
    "is_stream_record",
    "parse_envelope",
]
