"""
OpenSearch implementation of the indexing gateway.
"""

import logging
from typing import Any, Mapping, Optional

from opensearchpy import OpenSearch
from opensearchpy.exceptions import NotFoundError, OpenSearchException

from dynamo_search_relay.exceptions import IndexingError
from dynamo_search_relay.gateways.errors import handle_gateway_errors
from dynamo_search_relay.stream_types import SearchParams

logger = logging.getLogger(__name__)

_OPENSEARCH_ERRORS = (OpenSearchException,)

# Keys of SearchParams forwarded next to the query
_PASSTHROUGH_KEYS = ("sort", "from", "size")


def build_search_body(params: Optional[SearchParams]) -> dict[str, Any]:
    """Build a search request body; a missing query matches everything."""
    params = params or {}
    body: dict[str, Any] = {"query": params.get("query") or {"match_all": {}}}
    for key in _PASSTHROUGH_KEYS:
        if params.get(key) is not None:
            body[key] = params[key]  # type: ignore[literal-required]
    return body


class OpenSearchIndexingGateway:
    """Document operations against an OpenSearch domain."""

    def __init__(self, client: OpenSearch):
        self._client = client

    @handle_gateway_errors("create", _OPENSEARCH_ERRORS, IndexingError)
    def create(
        self, index: str, doc_id: str, document: Mapping[str, Any]
    ) -> bool:
        """Index ``document`` under ``doc_id``, replacing any earlier
        version."""
        response = self._client.index(
            index=index,
            id=doc_id,
            body=dict(document),
            refresh="wait_for",
        )
        result = response.get("result")
        logger.info(
            "Indexed document",
            extra={"index": index, "doc_id": doc_id, "result": result},
        )
        return result in {"created", "updated"}

    @handle_gateway_errors("get", _OPENSEARCH_ERRORS, IndexingError)
    def get(self, index: str, doc_id: str) -> Optional[dict[str, Any]]:
        try:
            response = self._client.get(index=index, id=doc_id)
        except NotFoundError:
            return None
        return response.get("_source")

    @handle_gateway_errors("search", _OPENSEARCH_ERRORS, IndexingError)
    def search(
        self, index: str, params: SearchParams
    ) -> list[dict[str, Any]]:
        response = self._client.search(
            index=index, body=build_search_body(params)
        )
        hits = response.get("hits", {}).get("hits", [])
        return [hit.get("_source", {}) for hit in hits]

    @handle_gateway_errors("delete", _OPENSEARCH_ERRORS, IndexingError)
    def delete(self, index: str, doc_id: str) -> None:
        self._client.delete(index=index, id=doc_id, refresh="wait_for")

    @handle_gateway_errors(
        "delete_by_query", _OPENSEARCH_ERRORS, IndexingError
    )
    def delete_by_query(self, index: str, query: Mapping[str, Any]) -> None:
        response = self._client.delete_by_query(
            index=index, body={"query": dict(query)}
        )
        logger.info(
            "Deleted documents by query",
            extra={"index": index, "deleted": response.get("deleted")},
        )


__all__ = ["OpenSearchIndexingGateway", "build_search_body"]
