"""
Notion Client

Thin async client for the parts of the Notion REST API this service uses:
database search, database schema retrieval, database queries, page
creation and block append.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from push_to_notion.config import Settings
from push_to_notion.connectors.http import request_with_retry
from push_to_notion.kernel.errors import NotionAPIError

logger = structlog.get_logger()

NOTION_API_VERSION = "2022-06-28"
NOTION_BASE_URL = "https://api.notion.com/v1"


@dataclass
class NotionSearchResult:
    """One hit from `POST /search`."""

    id: str
    object: str
    title: str = ""


@dataclass
class NotionPageSummary:
    """A database row as returned by `POST /databases/{id}/query`."""

    id: str
    properties: dict[str, Any] = field(default_factory=dict)

    def title_text(self, title_property: str) -> str:
        prop = self.properties.get(title_property) or {}
        return plain_text(prop.get("title") or [])


def plain_text(rich_text: list[dict[str, Any]]) -> str:
    """Concatenate the plain text of a rich text list."""
    return "".join(item.get("plain_text", "") for item in rich_text)


class NotionClient:
    """
    Async Notion API client.

    Reads (search, schema, query) are retried on transient failures.
    Writes (page creation, block append) are attempted once so a timeout
    after Notion accepted the request can never produce a duplicate page.
    """

    def __init__(
        self,
        access_token: str,
        *,
        base_url: str = NOTION_BASE_URL,
        timeout: float = 10.0,
        max_attempts: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._access_token = access_token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_attempts = max(1, max_attempts)
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotionClient":
        return cls(
            settings.notion_token,
            base_url=settings.notion_api_url,
            timeout=settings.notion_timeout_seconds,
            max_attempts=settings.http_max_attempts,
        )

    async def search(
        self,
        query: str | None,
        kind: str = "database",
        page_size: int = 25,
    ) -> list[NotionSearchResult]:
        """Search objects of one kind; a blank query lists Notion's defaults."""
        body: dict[str, Any] = {
            "filter": {"property": "object", "value": kind},
            "page_size": page_size,
        }
        if query:
            body["query"] = query

        data = await self._request("POST", "/search", operation="search", json=body)

        results = []
        for item in data.get("results", []):
            title_list = item.get("title")
            if not isinstance(title_list, list):
                title_list = []
            results.append(
                NotionSearchResult(
                    id=item["id"],
                    object=item.get("object", ""),
                    title=plain_text(title_list),
                )
            )
        return results

    async def get_schema(self, database_id: str) -> dict[str, dict[str, Any]]:
        """Return the database's property definitions in declaration order."""
        data = await self._request(
            "GET",
            f"/databases/{database_id}",
            operation="get_schema",
        )
        return data.get("properties", {})

    async def query_records(
        self,
        database_id: str,
        *,
        title_property: str,
        title_filter: str | None = None,
        page_size: int = 25,
    ) -> list[NotionPageSummary]:
        body: dict[str, Any] = {"page_size": page_size}
        if title_filter:
            body["filter"] = {
                "property": title_property,
                "title": {"contains": title_filter},
            }

        data = await self._request(
            "POST",
            f"/databases/{database_id}/query",
            operation="query_records",
            json=body,
        )
        return [
            NotionPageSummary(id=row["id"], properties=row.get("properties", {}))
            for row in data.get("results", [])
        ]

    async def create_record(self, database_id: str, properties: dict[str, Any]) -> str:
        data = await self._request(
            "POST",
            "/pages",
            operation="create_record",
            retry=False,
            json={
                "parent": {"database_id": database_id},
                "properties": properties,
            },
        )
        logger.info("Notion page created", database_id=database_id, page_id=data.get("id"))
        return data["id"]

    async def append_blocks(self, record_id: str, blocks: list[dict[str, Any]]) -> None:
        await self._request(
            "PATCH",
            f"/blocks/{record_id}/children",
            operation="append_blocks",
            retry=False,
            json={"children": blocks},
        )
        logger.info("Notion blocks appended", page_id=record_id, block_count=len(blocks))

    def _get_headers(self) -> dict[str, str]:
        """Get headers for Notion API requests."""
        return {
            "Authorization": f"Bearer {self._access_token}",
            "Notion-Version": NOTION_API_VERSION,
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        retry: bool = True,
        **kwargs: Any,
    ) -> dict[str, Any]:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await request_with_retry(
                client,
                method,
                f"{self._base_url}{path}",
                max_attempts=self._max_attempts if retry else 1,
                metrics_service="notion",
                metrics_operation=operation,
                headers=self._get_headers(),
                **kwargs,
            )

        if response.status_code >= 400:
            raise _api_error(response, operation)
        return response.json()


def _api_error(response: httpx.Response, operation: str) -> NotionAPIError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    notion_code = body.get("code") if isinstance(body, dict) else None
    message = body.get("message") if isinstance(body, dict) else None

    logger.warning(
        "Notion API error",
        operation=operation,
        status_code=response.status_code,
        notion_code=notion_code,
        error=message,
    )
    return NotionAPIError(
        status=response.status_code,
        notion_code=notion_code,
        message=message or f"Notion API error: {response.status_code}",
    )
