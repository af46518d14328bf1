"""Tests for GenerationService — fetch, format, complete, extract.

Notion is the in-memory FakeNotion and the provider is FakeLLM, so these
exercise the orchestration without any network.
"""

import asyncio

import pytest

from notion2code.exceptions import GenerationError, LLMNotConfiguredError, NoContentError
from notion2code.services.formatter import FALLBACK_PROMPT
from notion2code.services.generation_service import SYSTEM_PROMPT, GenerationService, check_llm
from tests.conftest import FakeLLM, FakeNotion, child_page, text_block


def run(coro):
    return asyncio.run(coro)


class TestGenerate:

    def test_structured_completion(self, notion: FakeNotion, llm: FakeLLM):
        notion.add("root", "Spec", [text_block("paragraph", "Build a login form"), child_page("sub")])
        notion.add("sub", "Validation", [text_block("bulleted_list_item", "email required")])

        result = run(GenerationService(notion, llm).generate(["root"], "React"))

        assert result.files == {"src/App.tsx": "export default 1"}
        assert result.structured is True
        assert result.strategy == "direct_json"
        assert result.page_count == 1
        assert result.model == "test-model"

        system, prompt = llm.calls[0]
        assert system == SYSTEM_PROMPT
        assert "React" in prompt
        assert "## Spec" in prompt
        assert "Build a login form" in prompt
        assert "  ### Validation" in prompt
        assert "• email required" in prompt
        assert result.prompt_chars == len(prompt)

    def test_failed_root_is_skipped(self, notion: FakeNotion, llm: FakeLLM):
        notion.add("good", "Good", [text_block("paragraph", "kept")])
        notion.failing.add("bad")

        result = run(GenerationService(notion, llm).generate(["bad", "good"], "app"))

        assert result.page_count == 1
        assert "kept" in llm.calls[0][1]

    def test_all_roots_failing_raises(self, notion: FakeNotion, llm: FakeLLM):
        notion.failing.add("bad")
        with pytest.raises(NoContentError):
            run(GenerationService(notion, llm).generate(["bad", "missing"], "app"))
        assert llm.calls == []

    def test_untitled_root_is_still_formatted(self, notion: FakeNotion, llm: FakeLLM):
        notion.pages["root"] = ({"id": "root", "properties": {}}, [])

        run(GenerationService(notion, llm).generate(["root"], "dashboard"))

        assert "## Untitled" in llm.calls[0][1]
        assert FALLBACK_PROMPT.format(project_type="dashboard") not in llm.calls[0][1]

    def test_unstructured_completion_returns_raw_text(self, notion: FakeNotion):
        notion.add("root", "Spec")
        llm = FakeLLM(completion="Sorry, I cannot do that.")

        result = run(GenerationService(notion, llm).generate(["root"], "app"))

        assert result.structured is False
        assert result.raw == "Sorry, I cannot do that."
        assert result.message

    def test_empty_completion_raises(self, notion: FakeNotion):
        notion.add("root", "Spec")
        with pytest.raises(GenerationError):
            run(GenerationService(notion, FakeLLM(completion="  ")).generate(["root"], "app"))

    def test_not_configured_raises_before_fetching(self, notion: FakeNotion):
        notion.add("root", "Spec")
        with pytest.raises(LLMNotConfiguredError):
            run(GenerationService(notion, FakeLLM(configured=False)).generate(["root"], "app"))
        assert notion.node_calls == []

    def test_uses_configured_depth(self, notion: FakeNotion, llm: FakeLLM):
        notion.add("r", "R", [child_page("a")])
        notion.add("a", "A", [child_page("b")])
        notion.add("b", "B")

        run(GenerationService(notion, llm, depth=1).generate(["r"], "app"))

        assert "b" not in notion.node_calls


class TestCheckLLM:

    def test_success(self):
        status = run(check_llm(FakeLLM(completion=" success ")))
        assert status.success is True
        assert status.response == "success"

    def test_not_configured(self):
        status = run(check_llm(FakeLLM(configured=False)))
        assert status.success is False
        assert "not configured" in status.message.lower()
