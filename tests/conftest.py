"""Shared test fixtures for the notion2code test suite.

Notion is replaced by ``FakeNotion``, an in-memory content source keyed by
page ID, and the LLM by ``FakeLLM``, which returns a canned completion.
Both are injected into the app through dependency overrides.
"""

import os

# Deterministic settings before any app imports.
os.environ["LOG_FORMAT"] = "text"
os.environ["NOTION_API_KEY"] = ""
os.environ["CHAT_API_KEY"] = ""
os.environ["RATE_LIMIT_PER_MINUTE"] = "60"

from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from notion2code.api.deps import get_llm_client, get_notion_client
from notion2code.exceptions import NotionAPIError, NotionNotFoundError
from notion2code.main import app
from notion2code.middleware.request_context import _rate_buckets
from notion2code.services.llm_client import LLMClient


# ---------------------------------------------------------------------------
# Raw Notion object factories
# ---------------------------------------------------------------------------


def rich(text: str) -> list[dict]:
    return [{"type": "text", "plain_text": text}]


def make_page(page_id: str, title: str, prop_name: str = "title") -> dict:
    return {
        "object": "page",
        "id": page_id,
        "properties": {prop_name: {"id": "title", "type": "title", "title": rich(title)}},
    }


def text_block(block_type: str, text: str, **extra: Any) -> dict:
    payload = {"rich_text": rich(text), **extra}
    return {"object": "block", "id": f"b-{block_type}-{text}", "type": block_type, block_type: payload}


def child_page(page_id: str, title: str = "") -> dict:
    return {"object": "block", "id": page_id, "type": "child_page", "child_page": {"title": title}}


class FakeNotion:
    """In-memory content source.

    ``pages`` maps ID -> (page object, raw blocks). IDs in ``failing`` raise
    ``NotionAPIError``; unknown IDs raise ``NotionNotFoundError``.
    """

    def __init__(self) -> None:
        self.pages: dict[str, tuple[dict, list[dict]]] = {}
        self.failing: set[str] = set()
        self.node_calls: list[str] = []
        self.block_calls: list[tuple[str, int]] = []

    def add(self, page_id: str, title: str, blocks: Optional[list[dict]] = None) -> None:
        self.pages[page_id] = (make_page(page_id, title), blocks or [])

    def _lookup(self, node_id: str) -> tuple[dict, list[dict]]:
        if node_id in self.failing:
            raise NotionAPIError("boom", node_id=node_id, status=500)
        if node_id not in self.pages:
            raise NotionNotFoundError(node_id)
        return self.pages[node_id]

    async def get_node(self, node_id: str, kind: str = "page") -> dict:
        self.node_calls.append(node_id)
        return self._lookup(node_id)[0]

    async def list_blocks(self, node_id: str, page_size: int = 100) -> list[dict]:
        self.block_calls.append((node_id, page_size))
        return list(self._lookup(node_id)[1][:page_size])

    async def search_pages(self, query: str = "", limit: int = 50) -> list:
        from notion2code.services.notion_client import _page_summary

        return [_page_summary(page) for page, _ in list(self.pages.values())[:limit]]

    async def close(self) -> None:
        pass


class FakeLLM(LLMClient):
    """LLMClient that records prompts and returns ``completion``."""

    def __init__(self, completion: str = '{"files": {"src/App.tsx": "export default 1"}}', configured: bool = True):
        super().__init__(model="test-model", api_key="test-key" if configured else "", api_base="")
        self.completion = completion
        self.calls: list[tuple[str, str]] = []

    async def complete(self, system: str, prompt: str, max_tokens: Optional[int] = None) -> str:
        if not self.is_configured():
            return await super().complete(system, prompt, max_tokens)
        self.calls.append((system, prompt))
        return self.completion


@pytest.fixture()
def notion() -> FakeNotion:
    return FakeNotion()


@pytest.fixture()
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture()
def client(notion, llm):
    """TestClient with Notion and the LLM replaced by fakes."""

    async def _override_notion():
        yield notion

    app.dependency_overrides[get_notion_client] = _override_notion
    app.dependency_overrides[get_llm_client] = lambda: llm
    _rate_buckets.clear()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
