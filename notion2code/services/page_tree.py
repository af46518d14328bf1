"""Recursive page-tree fetcher.

Retrieves a Notion node, its first page of blocks and, down to a bounded
depth, every child page or database those blocks reference. Sibling
branches are fetched concurrently.

Depth counts the levels of sub-pages still to descend below a node:
``max_depth=0`` fetches the root alone, ``max_depth=1`` adds its direct
children, and so on.

Cycle guard: each branch carries the frozenset of node IDs on its own
root-to-node path. A reference back to an ancestor short-circuits to an
empty tree, while the same page reached through two unrelated branches is
fetched in both.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from ..exceptions import NotionError
from .blocks import Block, ChildReferenceBlock, child_references, parse_blocks
from .titles import extract_title

logger = logging.getLogger(__name__)

DEFAULT_DEPTH = 2
DEFAULT_PAGE_SIZE = 100


class ContentSource(Protocol):
    """The two reads the fetcher needs. ``NotionClient`` satisfies this."""

    async def get_node(self, node_id: str, kind: str = "page") -> dict[str, Any]: ...

    async def list_blocks(self, node_id: str, page_size: int = DEFAULT_PAGE_SIZE) -> list[dict[str, Any]]: ...


@dataclass
class PageTree:
    """A fetched node with its blocks and fetched sub-pages.

    ``node`` is None for terminal branches: depth exhausted, cycle detected,
    or the fetch failed.
    """

    node: Optional[dict[str, Any]]
    blocks: list[Block] = field(default_factory=list)
    subpages: list["PageTree"] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "PageTree":
        return cls(node=None)

    @property
    def is_empty(self) -> bool:
        return self.node is None

    @property
    def node_id(self) -> Optional[str]:
        return self.node.get("id") if self.node else None

    @property
    def title(self) -> str:
        return extract_title(self.node)


async def fetch_tree(
    source: ContentSource,
    root_id: str,
    max_depth: int = DEFAULT_DEPTH,
    visited: frozenset[str] = frozenset(),
    page_size: int = DEFAULT_PAGE_SIZE,
    kind: str = "page",
) -> PageTree:
    """Fetch ``root_id`` and its sub-pages down to ``max_depth`` levels.

    A failure fetching the root itself propagates as a ``NotionError``:
    an empty root is useless to the caller. Failures below the root are
    logged and that branch becomes an empty tree, so one unreadable
    sub-page never aborts its siblings.

    Args:
        source: Content collaborator (``get_node`` / ``list_blocks``).
        root_id: Page or database ID to start from.
        max_depth: Sub-page levels to descend; negative returns an empty tree.
        visited: IDs already on the current path (internal; leave default).
        page_size: Block listing cap per node, first page only.
        kind: ``"page"`` or ``"database"``.

    Returns:
        The assembled ``PageTree``.
    """
    if root_id in visited or max_depth < 0:
        return PageTree.empty()

    path = visited | {root_id}
    node, blocks = await _fetch_node(source, root_id, kind, page_size)

    subpages: list[PageTree] = []
    if max_depth > 0:
        refs = child_references(blocks)
        if refs:
            subpages = list(await asyncio.gather(*(
                _fetch_branch(source, ref, max_depth - 1, path, page_size)
                for ref in refs
            )))

    return PageTree(node=node, blocks=blocks, subpages=subpages)


async def _fetch_node(
    source: ContentSource,
    node_id: str,
    kind: str,
    page_size: int,
) -> tuple[dict[str, Any], list[Block]]:
    """Metadata and first page of blocks for one node, requested concurrently."""
    if kind == "database":
        # Database rows are not blocks; only the metadata is readable here.
        return await source.get_node(node_id, kind), []

    node, raw_blocks = await asyncio.gather(
        source.get_node(node_id, kind),
        source.list_blocks(node_id, page_size),
    )
    return node, parse_blocks(raw_blocks)


async def _fetch_branch(
    source: ContentSource,
    ref: ChildReferenceBlock,
    max_depth: int,
    visited: frozenset[str],
    page_size: int,
) -> PageTree:
    try:
        return await fetch_tree(source, ref.node_id, max_depth, visited, page_size, ref.kind)
    except NotionError as e:
        logger.warning(
            "Sub-page fetch failed, omitting branch: %s",
            e.message,
            extra={"node_id": ref.node_id, "error_code": e.error_code.value},
        )
        return PageTree.empty()
    except Exception as e:
        logger.warning(
            "Sub-page fetch failed unexpectedly, omitting branch: %r",
            e,
            exc_info=True,
            extra={"node_id": ref.node_id},
        )
        return PageTree.empty()


def count_subpages(tree: PageTree) -> int:
    """Number of populated descendant trees at all levels."""
    return sum(
        1 + count_subpages(sub)
        for sub in tree.subpages
        if not sub.is_empty
    )


def summarize_tree(tree: PageTree) -> Optional[dict[str, Any]]:
    """Simplified ``{id, title, block_count, subpages}`` view; None for empty trees."""
    if tree.is_empty:
        return None
    return {
        "id": tree.node_id or "unknown",
        "title": tree.title,
        "block_count": len(tree.blocks),
        "subpages": [
            summary for summary in (summarize_tree(sub) for sub in tree.subpages)
            if summary is not None
        ],
    }


def collect_titles(tree: PageTree) -> list[str]:
    """Titles of every populated node, pre-order."""
    if tree.is_empty:
        return []
    titles = [tree.title]
    for sub in tree.subpages:
        titles.extend(collect_titles(sub))
    return titles
