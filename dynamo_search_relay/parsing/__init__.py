"""Message envelope parsing and record flattening."""

from dynamo_search_relay.parsing.envelope import (
    EnvelopeKind,
    ResolvedEnvelope,
    classify_envelope,
    is_stream_record,
    parse_envelope,
)
from dynamo_search_relay.parsing.flattener import (
    flatten_record,
    require_primary_key,
    unmarshall_image,
)

__all__ = [
    "EnvelopeKind",
    "ResolvedEnvelope",
    "classify_envelope",
    "is_stream_record",
    "parse_envelope",
    "flatten_record",
    "require_primary_key",
    "unmarshall_image",
]
