"""Shared route dependencies."""

from typing import AsyncIterator, Optional

from fastapi import Header

from ..core.config import settings
from ..exceptions import MissingCredentialError
from ..services.llm_client import LLMClient
from ..services.notion_client import NotionClient


def get_notion_token(
    notion_api_key: Optional[str] = Header(default=None, alias="Notion-API-Key"),
) -> str:
    """Token from the Notion-API-Key header, else the configured fallback."""
    token = (notion_api_key or "").strip() or settings.notion_api_key
    if not token:
        raise MissingCredentialError()
    return token


async def get_notion_client(
    notion_api_key: Optional[str] = Header(default=None, alias="Notion-API-Key"),
) -> AsyncIterator[NotionClient]:
    """Per-request Notion client, closed when the response is sent."""
    client = NotionClient(get_notion_token(notion_api_key))
    try:
        yield client
    finally:
        await client.close()


def get_llm_client() -> LLMClient:
    return LLMClient()
