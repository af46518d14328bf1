"""HTTP client for the Notion REST API."""

import logging
from typing import Any, Optional

import httpx

from ..core.config import settings
from ..exceptions import NotionAPIError, NotionAuthError, NotionNotFoundError
from ..schemas.notion import NotionPageSummary
from .titles import extract_title

logger = logging.getLogger(__name__)

# Notion caps page_size at 100 for block children and search.
MAX_PAGE_SIZE = 100


class NotionClient:
    """Async client wrapping the subset of the Notion API the pipeline reads.

    One instance is bound to one integration token. Failed requests are not
    retried: 401/403 raise ``NotionAuthError``, 404 raises
    ``NotionNotFoundError``, anything else raises ``NotionAPIError``.

    Configuration via settings:
        NOTION_API_URL: API base URL (default: https://api.notion.com/v1)
        NOTION_VERSION: Notion-Version header (default: 2022-06-28)
        NOTION_TIMEOUT: Request timeout in seconds (default: 30)
    """

    def __init__(
        self,
        token: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.token = token
        self.base_url = base_url or settings.notion_api_url
        self.timeout = timeout if timeout is not None else settings.notion_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "NotionClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Notion-Version": settings.notion_version,
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        node_id: str = "",
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Execute one request and translate failures into NotionError types."""
        client = await self._get_client()
        try:
            resp = await client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise NotionAPIError(f"Notion request failed: {exc}", node_id=node_id) from exc

        if resp.status_code in (401, 403):
            raise NotionAuthError(node_id, status=resp.status_code)
        if resp.status_code == 404:
            raise NotionNotFoundError(node_id)
        if resp.status_code >= 400:
            raise NotionAPIError(
                _error_message(resp), node_id=node_id, status=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise NotionAPIError("Notion returned a non-JSON response", node_id=node_id) from exc
        if not isinstance(data, dict):
            raise NotionAPIError("Notion returned an unexpected response shape", node_id=node_id)
        return data

    async def get_node(self, node_id: str, kind: str = "page") -> dict[str, Any]:
        """Retrieve page or database metadata. Maps to GET /pages/{id} or /databases/{id}."""
        collection = "databases" if kind == "database" else "pages"
        return await self._request("GET", f"/{collection}/{node_id}", node_id=node_id)

    async def list_blocks(
        self,
        node_id: str,
        page_size: int = MAX_PAGE_SIZE,
    ) -> list[dict[str, Any]]:
        """List a node's immediate child blocks. Maps to GET /blocks/{id}/children.

        Only the first page is read; ``has_more`` is logged and otherwise
        ignored.
        """
        page_size = max(1, min(page_size, MAX_PAGE_SIZE))
        data = await self._request(
            "GET",
            f"/blocks/{node_id}/children",
            node_id=node_id,
            params={"page_size": page_size},
        )
        if data.get("has_more"):
            logger.info(
                "Block listing truncated at first page",
                extra={"node_id": node_id, "page_size": page_size},
            )
        return list(data.get("results") or [])

    async def search_pages(self, query: str = "", limit: int = 50) -> list[NotionPageSummary]:
        """Pages shared with the integration, most recently edited first. Maps to POST /search."""
        body: dict[str, Any] = {
            "filter": {"property": "object", "value": "page"},
            "sort": {"direction": "descending", "timestamp": "last_edited_time"},
            "page_size": max(1, min(limit, MAX_PAGE_SIZE)),
        }
        if query:
            body["query"] = query
        data = await self._request("POST", "/search", json=body)
        return [_page_summary(page) for page in data.get("results") or []]

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    message = body.get("message") if isinstance(body, dict) else None
    return f"Notion API error {resp.status_code}: {message or resp.reason_phrase}"


def _page_summary(page: dict[str, Any]) -> NotionPageSummary:
    icon = page.get("icon") or {}
    icon_value = icon.get("emoji") or (icon.get("external") or {}).get("url")
    return NotionPageSummary(
        id=page.get("id", ""),
        title=extract_title(page),
        icon=icon_value,
        last_edited=page.get("last_edited_time"),
        url=page.get("url"),
    )
