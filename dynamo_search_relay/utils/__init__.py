"""Logging and time utilities."""

from dynamo_search_relay.utils.logging import (
    StructuredFormatter,
    configure_logging,
)
from dynamo_search_relay.utils.timestamps import to_iso_z, utc_now

__all__ = ["StructuredFormatter", "configure_logging", "to_iso_z", "utc_now"]
