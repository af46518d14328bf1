"""Format fetched page trees as markdown for LLM consumption."""

import logging

from .blocks import (
    Block,
    BulletedItemBlock,
    ChildReferenceBlock,
    CodeBlock,
    HeadingBlock,
    ImageBlock,
    NumberedItemBlock,
    ParagraphBlock,
    TodoBlock,
    ToggleBlock,
    UnknownBlock,
)
from .page_tree import PageTree

logger = logging.getLogger(__name__)

MAX_HEADING_DEPTH = 6
# Page titles sit two levels below the nesting level: roots are h2.
PAGE_HEADING_OFFSET = 2
IMAGE_PLACEHOLDER = "image_url"

FALLBACK_PROMPT = "Create a {project_type} component with standard features and best practices."


def heading_marker(level: int, offset: int = PAGE_HEADING_OFFSET) -> str:
    """``#`` run for a heading at nesting ``level``, capped at h6."""
    return "#" * min(level + offset, MAX_HEADING_DEPTH)


def format_block(block: Block, level: int = 0) -> str:
    """Render one block at the given nesting level; empty string when it has no output."""
    indent = "  " * level

    if isinstance(block, (ChildReferenceBlock, UnknownBlock)):
        # Child pages are rendered through recursion, not inline.
        return ""

    if isinstance(block, ImageBlock):
        return f"{indent}![{block.caption}]({block.url or IMAGE_PLACEHOLDER})\n\n"

    if not block.text:
        return ""

    if isinstance(block, ParagraphBlock):
        return f"{indent}{block.text}\n\n"
    if isinstance(block, HeadingBlock):
        return f"{indent}{heading_marker(level, block.level)} {block.text}\n\n"
    if isinstance(block, BulletedItemBlock):
        return f"{indent}• {block.text}\n"
    if isinstance(block, NumberedItemBlock):
        return f"{indent}1. {block.text}\n"
    if isinstance(block, CodeBlock):
        return f"{indent}```{block.language}\n{block.text}\n{indent}```\n\n"
    if isinstance(block, TodoBlock):
        mark = "✅" if block.checked else "⬜"
        return f"{indent}{mark} {block.text}\n"
    if isinstance(block, ToggleBlock):
        return f"{indent}➤ {block.text}\n"
    return ""


def format_tree(tree: PageTree, title: str, level: int = 0) -> str:
    """Serialize a tree depth-first: title heading, block lines, then sub-pages.

    Sub-pages are formatted one level deeper under their own titles. Empty
    branches (depth/cycle terminals and failed fetches) are omitted.
    """
    indent = "  " * level
    parts = [f"{indent}{heading_marker(level)} {title}\n\n"]

    for block in tree.blocks:
        try:
            parts.append(format_block(block, level))
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("Skipping block that failed to format: %s", e)

    for subpage in tree.subpages:
        if subpage.is_empty:
            continue
        parts.append(format_tree(subpage, subpage.title, level + 1))

    return "".join(parts)


def format_trees(trees: list[PageTree]) -> str:
    """Format several top-level trees independently and concatenate them."""
    return "".join(format_tree(tree, tree.title) for tree in trees)


def build_prompt_content(trees: list[PageTree], project_type: str) -> str:
    """Aggregate formatted content, or a generic instruction when there is none."""
    content = format_trees(trees)
    if not content.strip():
        logger.info("No formatted content available, using fallback prompt")
        return FALLBACK_PROMPT.format(project_type=project_type)
    return content
