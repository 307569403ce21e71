"""Table-to-index and table-to-queue routing."""

from dynamo_search_relay.routing.router import (
    extract_table_name,
    resolve_channel,
    route,
)

__all__ = ["extract_table_name", "resolve_channel", "route"]
