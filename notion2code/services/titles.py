"""Title extraction for Notion pages and databases."""

import logging
from typing import Any, Optional

from .blocks import rich_text_to_plain

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"


def _title_property(properties: dict) -> Optional[dict]:
    """Find the title property: "title", then "Name", then the first title-typed one."""
    for name in ("title", "Name"):
        prop = properties.get(name)
        if isinstance(prop, dict) and isinstance(prop.get("title"), list):
            return prop

    for prop in properties.values():
        if (
            isinstance(prop, dict)
            and prop.get("type") == "title"
            and isinstance(prop.get("title"), list)
            and prop["title"]
        ):
            return prop
    return None


def extract_title(node: Any) -> str:
    """Plain-text title of a page or database object, or "Untitled".

    Never raises: malformed property bags degrade to the default.
    """
    if not isinstance(node, dict):
        return UNTITLED

    try:
        properties = node.get("properties")
        if isinstance(properties, dict):
            prop = _title_property(properties)
            if prop is not None:
                title = rich_text_to_plain(prop["title"])
                if title:
                    return title

        # Database objects carry their title at the top level.
        title = rich_text_to_plain(node.get("title"))
        return title or UNTITLED
    except (AttributeError, KeyError, TypeError) as e:
        logger.debug("Title extraction failed for %s: %s", node.get("id"), e)
        return UNTITLED
