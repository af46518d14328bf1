"""Notion browsing endpoints: page search and page-tree inspection."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..core.config import settings
from ..schemas.notion import NotionPageSummary, TreeNodeSummary, TreeResponse
from ..services.formatter import format_tree
from ..services.notion_client import NotionClient
from ..services.page_tree import count_subpages, fetch_tree, summarize_tree
from .deps import get_notion_client

router = APIRouter(prefix="/api/notion", tags=["notion"])


@router.get("/pages", response_model=List[NotionPageSummary])
async def list_pages(
    query: str = Query("", max_length=200),
    limit: int = Query(50, ge=1, le=100),
    client: NotionClient = Depends(get_notion_client),
):
    """Pages shared with the integration, most recently edited first."""
    return await client.search_pages(query=query, limit=limit)


@router.get("/tree", response_model=TreeResponse)
async def get_tree(
    page_id: str = Query(..., min_length=1),
    depth: Optional[int] = Query(None, ge=0, le=5),
    client: NotionClient = Depends(get_notion_client),
):
    """Fetch a page with its sub-pages and return the summary and formatted prompt.

    A failure reading the root page is returned as an error; failed
    sub-pages are left out of the result.
    """
    depth = settings.fetch_depth if depth is None else depth
    tree = await fetch_tree(
        client, page_id, depth, page_size=settings.notion_block_page_size,
    )
    title = tree.title
    return TreeResponse(
        page_id=page_id,
        depth=depth,
        title=title,
        block_count=len(tree.blocks),
        subpage_count=count_subpages(tree),
        tree=TreeNodeSummary(**summarize_tree(tree)),
        formatted=format_tree(tree, title),
    )
