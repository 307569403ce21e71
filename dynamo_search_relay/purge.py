"""
Retention purge for relayed documents.

Removes documents whose ``event_timestamp`` is older than the retention
window from every configured index. Each index is purged independently; a
failure on one is logged and the remaining indices are still purged.
"""

# pylint: disable=broad-exception-caught

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from dateutil.relativedelta import relativedelta

from dynamo_search_relay.constants import (
    EVENT_TIMESTAMP_FIELD,
    RETENTION_MONTHS,
)
from dynamo_search_relay.gateways.protocols import IndexingGateway
from dynamo_search_relay.models import PurgeResult
from dynamo_search_relay.stream_types import MetricsRecorder
from dynamo_search_relay.utils.timestamps import to_iso_z, utc_now

logger = logging.getLogger(__name__)


def compute_purge_cutoff(now: datetime) -> str:
    """Return the ISO-8601 instant before which documents are purged."""
    return to_iso_z(now - relativedelta(months=RETENTION_MONTHS), "seconds")


def build_purge_query(cutoff: str) -> dict[str, Any]:
    """Range query matching documents strictly older than ``cutoff``."""
    return {"range": {EVENT_TIMESTAMP_FIELD: {"lt": cutoff}}}


class PurgeEngine:
    """Deletes expired documents from a fixed list of indices."""

    def __init__(
        self,
        indexing: IndexingGateway,
        indices: Sequence[str],
        metrics: Optional[MetricsRecorder] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._indexing = indexing
        self._indices = tuple(indices)
        self._metrics = metrics
        self._clock = clock

    def purge(self) -> PurgeResult:
        """
        Purge every configured index. Best effort; never raises.
        """
        cutoff = compute_purge_cutoff(self._clock())
        query = build_purge_query(cutoff)
        purged: list[str] = []
        failed: list[str] = []

        logger.info(
            "Purging expired documents",
            extra={"indices": list(self._indices), "cutoff": cutoff},
        )

        for index in self._indices:
            try:
                self._indexing.delete_by_query(index, query)
            except Exception as exc:
                logger.exception(
                    "Failed to purge records from index",
                    extra={
                        "index": index,
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    },
                )
                failed.append(index)
                if self._metrics:
                    self._metrics.count(
                        "IndexPurgeFailed", 1, {"index": index}
                    )
                continue

            logger.info(
                "Successfully purged old records", extra={"index": index}
            )
            purged.append(index)
            if self._metrics:
                self._metrics.count("IndicesPurged", 1, {"index": index})

        return PurgeResult(
            cutoff=cutoff, purged=tuple(purged), failed=tuple(failed)
        )


__all__ = ["PurgeEngine", "build_purge_query", "compute_purge_cutoff"]
