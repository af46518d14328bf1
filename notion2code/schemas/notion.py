"""Notion page and tree schemas."""

from pydantic import BaseModel
from typing import Optional, List


class NotionPageSummary(BaseModel):
    """A page returned by workspace search."""
    id: str
    title: str
    icon: Optional[str] = None
    last_edited: Optional[str] = None
    url: Optional[str] = None


class TreeNodeSummary(BaseModel):
    """Simplified view of one fetched node and its populated sub-pages."""
    id: str
    title: str
    block_count: int
    subpages: List["TreeNodeSummary"] = []


TreeNodeSummary.model_rebuild()


class TreeResponse(BaseModel):
    """Result of fetching and formatting a single page tree."""
    page_id: str
    depth: int
    title: str
    block_count: int
    subpage_count: int
    tree: TreeNodeSummary
    formatted: str
