"""Business logic services."""

from .generation_service import GenerationService
from .notion_client import NotionClient
from .page_tree import PageTree, fetch_tree

__all__ = ["GenerationService", "NotionClient", "PageTree", "fetch_tree"]
