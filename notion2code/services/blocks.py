"""Typed view over Notion block objects.

Notion returns each block as ``{"type": "<tag>", "<tag>": {...}}`` with a
payload whose fields depend on the tag. ``parse_block`` converts that into
one of the frozen dataclasses below so the formatter never has to probe for
field presence. Anything it cannot interpret becomes ``UnknownBlock``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParagraphBlock:
    text: str


@dataclass(frozen=True)
class HeadingBlock:
    level: int  # 1, 2 or 3
    text: str


@dataclass(frozen=True)
class BulletedItemBlock:
    text: str


@dataclass(frozen=True)
class NumberedItemBlock:
    text: str


@dataclass(frozen=True)
class CodeBlock:
    text: str
    language: str = ""


@dataclass(frozen=True)
class TodoBlock:
    text: str
    checked: bool = False


@dataclass(frozen=True)
class ToggleBlock:
    text: str


@dataclass(frozen=True)
class ImageBlock:
    caption: str
    url: Optional[str] = None


@dataclass(frozen=True)
class ChildReferenceBlock:
    """Points at a nested page or database; traversed, never inlined."""

    node_id: str
    kind: str  # "page" or "database"
    title: str = ""


@dataclass(frozen=True)
class UnknownBlock:
    type: str


Block = Union[
    ParagraphBlock,
    HeadingBlock,
    BulletedItemBlock,
    NumberedItemBlock,
    CodeBlock,
    TodoBlock,
    ToggleBlock,
    ImageBlock,
    ChildReferenceBlock,
    UnknownBlock,
]

_TEXT_BLOCKS = {
    "paragraph": ParagraphBlock,
    "bulleted_list_item": BulletedItemBlock,
    "numbered_list_item": NumberedItemBlock,
    "toggle": ToggleBlock,
}

_HEADING_LEVELS = {"heading_1": 1, "heading_2": 2, "heading_3": 3}


def rich_text_to_plain(rich_text: Any) -> str:
    """Concatenate the ``plain_text`` runs of a rich-text array, in order."""
    if not isinstance(rich_text, list):
        return ""
    return "".join(
        run.get("plain_text") or ""
        for run in rich_text
        if isinstance(run, dict)
    )


def parse_block(raw: Any) -> Block:
    """Convert one raw Notion block into its typed variant. Never raises."""
    if not isinstance(raw, dict):
        return UnknownBlock(type="invalid")

    tag = raw.get("type")
    if not isinstance(tag, str):
        return UnknownBlock(type="invalid")

    payload = raw.get(tag)
    if not isinstance(payload, dict):
        return UnknownBlock(type=tag)

    try:
        return _parse_payload(raw, tag, payload)
    except (AttributeError, TypeError, ValueError) as e:
        logger.debug("Unparseable %s block %s: %s", tag, raw.get("id"), e)
        return UnknownBlock(type=tag)


def _parse_payload(raw: dict, tag: str, payload: dict) -> Block:
    if tag in _TEXT_BLOCKS:
        return _TEXT_BLOCKS[tag](text=rich_text_to_plain(payload.get("rich_text")))

    if tag in _HEADING_LEVELS:
        return HeadingBlock(
            level=_HEADING_LEVELS[tag],
            text=rich_text_to_plain(payload.get("rich_text")),
        )

    if tag == "code":
        return CodeBlock(
            text=rich_text_to_plain(payload.get("rich_text")),
            language=payload.get("language") or "",
        )

    if tag == "to_do":
        return TodoBlock(
            text=rich_text_to_plain(payload.get("rich_text")),
            checked=bool(payload.get("checked")),
        )

    if tag == "image":
        caption = rich_text_to_plain(payload.get("caption")) or "Image"
        url = (payload.get("file") or {}).get("url") or (payload.get("external") or {}).get("url")
        return ImageBlock(caption=caption, url=url)

    if tag in ("child_page", "child_database"):
        node_id = raw.get("id")
        if not node_id:
            return UnknownBlock(type=tag)
        return ChildReferenceBlock(
            node_id=node_id,
            kind="page" if tag == "child_page" else "database",
            title=payload.get("title") or "",
        )

    return UnknownBlock(type=tag)


def parse_blocks(raw_blocks: Any) -> list[Block]:
    if not isinstance(raw_blocks, list):
        return []
    return [parse_block(raw) for raw in raw_blocks]


def child_references(blocks: list[Block]) -> list[ChildReferenceBlock]:
    """Child page/database references in block order."""
    return [b for b in blocks if isinstance(b, ChildReferenceBlock)]
