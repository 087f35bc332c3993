"""Notion REST API client for database queries and block listings."""

from __future__ import annotations

import time
from typing import Any, Protocol

import httpx
import structlog

from notion_blog import metrics
from notion_blog.notion_models import BlockList, QueryDatabaseResponse

log = structlog.get_logger()


class NotionClientProtocol(Protocol):
    """Interface for Notion API operations."""

    async def query_database(
        self,
        database_id: str,
        *,
        filter: dict[str, Any] | None = None,
        sorts: list[dict[str, Any]] | None = None,
    ) -> QueryDatabaseResponse: ...
    async def list_block_children(self, block_id: str) -> BlockList: ...


class NotionClient:
    """Notion API client using bearer auth with an integration token.

    Only the first page of every listing is requested; cursors in the
    responses are left unused.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = "https://api.notion.com/v1",
        notion_version: str = "2022-06-28",
        timeout: float = 30.0,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {token}",
                "Notion-Version": notion_version,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def query_database(
        self,
        database_id: str,
        *,
        filter: dict[str, Any] | None = None,
        sorts: list[dict[str, Any]] | None = None,
    ) -> QueryDatabaseResponse:
        """Query a database and return the first page of results."""
        body: dict[str, Any] = {}
        if filter is not None:
            body["filter"] = filter
        if sorts is not None:
            body["sorts"] = sorts

        start = time.monotonic()
        resp = await self._client.post(f"/databases/{database_id}/query", json=body)
        self._record("query_database", start)
        resp.raise_for_status()

        result = QueryDatabaseResponse.model_validate(resp.json())
        await log.adebug(
            "notion_database_queried",
            database_id=database_id,
            count=len(result.results),
            has_more=result.has_more,
        )
        return result

    async def list_block_children(self, block_id: str) -> BlockList:
        """List the first page of child blocks of a page or block."""
        start = time.monotonic()
        resp = await self._client.get(f"/blocks/{block_id}/children")
        self._record("list_block_children", start)
        resp.raise_for_status()

        result = BlockList.model_validate(resp.json())
        await log.adebug(
            "notion_blocks_listed",
            block_id=block_id,
            count=len(result.results),
            has_more=result.has_more,
        )
        return result

    @staticmethod
    def _record(operation: str, start: float) -> None:
        attrs = {"operation": operation}
        metrics.notion_requests_total.add(1, attrs)
        metrics.notion_request_duration.record(time.monotonic() - start, attrs)
