"""Tests for title extraction and tree formatting."""

import asyncio

from notion2code.services.blocks import (
    BulletedItemBlock,
    CodeBlock,
    HeadingBlock,
    ImageBlock,
    NumberedItemBlock,
    ParagraphBlock,
    TodoBlock,
    ToggleBlock,
    UnknownBlock,
    ChildReferenceBlock,
)
from notion2code.services.formatter import (
    FALLBACK_PROMPT,
    build_prompt_content,
    format_block,
    format_tree,
    format_trees,
    heading_marker,
)
from notion2code.services.page_tree import PageTree, fetch_tree
from notion2code.services.titles import extract_title
from tests.conftest import FakeNotion, child_page, make_page, rich, text_block


class TestExtractTitle:

    def test_title_property(self):
        assert extract_title(make_page("p", "Product Requirements")) == "Product Requirements"

    def test_name_property(self):
        assert extract_title(make_page("p", "Roadmap", prop_name="Name")) == "Roadmap"

    def test_first_title_typed_property(self):
        node = {
            "properties": {
                "Status": {"type": "select", "select": {"name": "Done"}},
                "Task": {"type": "title", "title": rich("Ship it")},
            }
        }
        assert extract_title(node) == "Ship it"

    def test_concatenates_runs_in_order(self):
        node = {"properties": {"title": {"type": "title", "title": rich("User ") + rich("Journey")}}}
        assert extract_title(node) == "User Journey"

    def test_database_top_level_title(self):
        assert extract_title({"object": "database", "title": rich("Tasks")}) == "Tasks"

    def test_untitled_when_missing(self):
        assert extract_title({"properties": {}}) == "Untitled"
        assert extract_title({"properties": {"title": {"type": "title", "title": []}}}) == "Untitled"

    def test_untitled_for_malformed_input(self):
        assert extract_title(None) == "Untitled"
        assert extract_title({"properties": "broken"}) == "Untitled"
        assert extract_title({"properties": {"title": {"title": ["not-a-dict", None]}}}) == "Untitled"


class TestHeadingMarker:

    def test_page_heading_levels(self):
        assert heading_marker(0) == "##"
        assert heading_marker(4) == "######"
        assert heading_marker(10) == "######"

    def test_monotonic_and_capped(self):
        lengths = [len(heading_marker(level)) for level in range(12)]
        assert lengths == sorted(lengths)
        assert max(lengths) == 6

    def test_tree_title_heading_at_levels(self):
        tree = PageTree(node=make_page("p", "T"))
        for level, expected in ((0, 2), (4, 6), (10, 6)):
            first_line = format_tree(tree, "T", level).splitlines()[0].strip()
            assert first_line == "#" * expected + " T"


class TestFormatBlock:

    def test_paragraph(self):
        assert format_block(ParagraphBlock("Hello")) == "Hello\n\n"

    def test_headings_scale_with_level(self):
        assert format_block(HeadingBlock(1, "H")) == "# H\n\n"
        assert format_block(HeadingBlock(2, "H"), level=1) == "  ### H\n\n"
        assert format_block(HeadingBlock(3, "H"), level=5) == "          ###### H\n\n"

    def test_list_items(self):
        assert format_block(BulletedItemBlock("a")) == "• a\n"
        assert format_block(NumberedItemBlock("b")) == "1. b\n"

    def test_code_is_fenced_with_language(self):
        assert format_block(CodeBlock("print(1)", "python")) == "```python\nprint(1)\n```\n\n"

    def test_todo_glyphs(self):
        assert format_block(TodoBlock("done", True)) == "✅ done\n"
        assert format_block(TodoBlock("open", False)) == "⬜ open\n"

    def test_toggle(self):
        assert format_block(ToggleBlock("more")) == "➤ more\n"

    def test_image_urls_and_placeholder(self):
        assert format_block(ImageBlock("Logo", "https://x/y.png")) == "![Logo](https://x/y.png)\n\n"
        assert format_block(ImageBlock("Image", None)) == "![Image](image_url)\n\n"

    def test_skipped_blocks(self):
        assert format_block(ChildReferenceBlock("id", "page")) == ""
        assert format_block(UnknownBlock("table")) == ""
        assert format_block(ParagraphBlock("")) == ""


class TestFormatTree:

    def test_end_to_end_root_with_child_page(self, notion: FakeNotion):
        notion.add("root", "Root Title", [text_block("paragraph", "Hello"), child_page("x")])
        notion.add("x", "X Title", [child_page("y")])
        notion.add("y", "Y Title")

        tree = asyncio.run(fetch_tree(notion, "root", max_depth=1))

        assert len(tree.subpages) == 1
        assert tree.subpages[0].subpages == []

        output = format_tree(tree, tree.title)
        lines = [line for line in output.splitlines() if line.strip()]
        assert lines == ["## Root Title", "Hello", "  ### X Title"]

    def test_empty_subpages_are_omitted(self):
        tree = PageTree(
            node=make_page("r", "R"),
            subpages=[PageTree.empty(), PageTree(node=make_page("s", "S"))],
        )
        assert format_tree(tree, "R") == "## R\n\n  ### S\n\n"

    def test_block_order_preserved(self):
        tree = PageTree(
            node=make_page("r", "R"),
            blocks=[BulletedItemBlock("one"), UnknownBlock("divider"), BulletedItemBlock("two")],
        )
        assert format_tree(tree, "R") == "## R\n\n• one\n• two\n"

    def test_multiple_trees_concatenate_in_order(self):
        trees = [
            PageTree(node=make_page("a", "A"), blocks=[ParagraphBlock("a text")]),
            PageTree(node=make_page("b", "B"), blocks=[ParagraphBlock("b text")]),
        ]
        assert format_trees(trees) == "## A\n\na text\n\n## B\n\nb text\n\n"


class TestPromptContent:

    def test_uses_formatted_trees(self):
        trees = [PageTree(node=make_page("a", "A"), blocks=[ParagraphBlock("x")])]
        assert build_prompt_content(trees, "dashboard") == "## A\n\nx\n\n"

    def test_fallback_when_nothing_formatted(self):
        assert build_prompt_content([], "dashboard") == FALLBACK_PROMPT.format(project_type="dashboard")
