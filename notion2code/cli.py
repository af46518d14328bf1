"""Command-line inspection of the Notion page-tree pipeline.

Fetches a page tree, prints what was found, and writes the formatted prompt
and a JSON summary so the parser can be checked without running the API.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .core.config import settings
from .core.logging_config import setup_logging
from .exceptions import NotionError
from .services.completion_parser import extract_files
from .services.file_tree import render_file_listing
from .services.formatter import format_tree
from .services.notion_client import NotionClient
from .services.page_tree import collect_titles, count_subpages, fetch_tree, summarize_tree

logger = logging.getLogger(__name__)


async def inspect_tree(token: str, page_id: str, depth: int, output: Optional[Path]) -> int:
    async with NotionClient(token) as client:
        try:
            tree = await fetch_tree(client, page_id, depth, page_size=settings.notion_block_page_size)
        except NotionError as e:
            print(f"Failed to fetch {page_id}: {e.message}", file=sys.stderr)
            return 1

    titles = collect_titles(tree)
    formatted = format_tree(tree, tree.title)
    summary = summarize_tree(tree)

    print(f"Page:      {tree.title} ({page_id})")
    print(f"Blocks:    {len(tree.blocks)}")
    print(f"Sub-pages: {count_subpages(tree)} (depth {depth})")
    print(f"Prompt:    {len(formatted)} characters")
    for title in titles:
        print(f"  - {title}")

    if output:
        output.mkdir(parents=True, exist_ok=True)
        (output / f"{page_id}.md").write_text(formatted, encoding="utf-8")
        (output / f"{page_id}.json").write_text(json.dumps(summary, indent=2), encoding="utf-8")
        print(f"Wrote {output / (page_id + '.md')} and {output / (page_id + '.json')}")
    return 0


def extract_command(path: Path) -> int:
    result = extract_files(path.read_text(encoding="utf-8"))
    print(f"Strategy: {result.strategy} ({len(result.files)} file(s))")
    if not result.structured:
        print(result.message, file=sys.stderr)
    print(render_file_listing(result.files))
    return 0 if result.structured else 2


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="notion2code",
        description="Inspect Notion page trees and model completions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  notion2code tree f123456789abcdef1234 --depth 2 --output tmp/
  notion2code extract completion.txt
""",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    sub = parser.add_subparsers(dest="command", required=True)

    tree_cmd = sub.add_parser("tree", help="Fetch a page tree and format it")
    tree_cmd.add_argument("page_id", help="Root Notion page ID")
    tree_cmd.add_argument("--depth", type=int, default=settings.fetch_depth, help="Sub-page levels to follow")
    tree_cmd.add_argument("--token", default=None, help="Notion integration token (default: NOTION_API_KEY)")
    tree_cmd.add_argument("--output", type=Path, default=None, help="Directory for the .md and .json output")

    extract_cmd = sub.add_parser("extract", help="Extract files from a saved completion")
    extract_cmd.add_argument("path", type=Path, help="File containing the raw completion text")

    args = parser.parse_args(argv)
    setup_logging(log_level=args.log_level, log_format="text")

    if args.command == "extract":
        return extract_command(args.path)

    token = args.token or settings.notion_api_key
    if not token:
        parser.error("a Notion token is required (--token or NOTION_API_KEY)")
    if args.depth < 0:
        parser.error("--depth must be >= 0")
    return asyncio.run(inspect_tree(token, args.page_id, args.depth, args.output))


if __name__ == "__main__":
    sys.exit(main())
