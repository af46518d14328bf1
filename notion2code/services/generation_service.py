"""Code generation service: turns selected Notion pages into project files.

Fetches every selected root page tree, flattens them into one prompt,
sends it to the text-generation provider, and extracts a file map from the
completion.
"""

import asyncio
import logging
from typing import Optional

from ..core.config import settings
from ..exceptions import GenerationError, LLMNotConfiguredError, NoContentError, NotionError
from ..schemas.generation import GenerateResponse, LLMStatusResponse
from .completion_parser import extract_files
from .formatter import build_prompt_content
from .llm_client import LLMClient
from .page_tree import ContentSource, PageTree, fetch_tree

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "You are a skilled full-stack developer generating a functional prototype from "
    "product documentation exported from Notion. Implement every requirement in the "
    "documentation with complete frontend and backend code, typed throughout, with "
    "loading states, validation and error handling.\n\n"
    "Respond with ONLY a JSON object of the form "
    '{"files": {"<relative/path.ext>": "<complete file content>", ...}} '
    "and no other text."
)

USER_PROMPT_TEMPLATE = (
    "Create a complete, functional {project_type} prototype based on the following "
    "Notion documentation:\n\n"
    "{content}\n\n"
    "Include any backend routes, data flow, state management, validation and user "
    "feedback the documentation calls for."
)

PROBE_PROMPT = "Respond with only the word 'success' if you can read this message."


class GenerationService:
    """Generates project files from Notion page trees."""

    def __init__(
        self,
        source: ContentSource,
        llm: Optional[LLMClient] = None,
        depth: Optional[int] = None,
        page_size: Optional[int] = None,
    ):
        self.source = source
        self.llm = llm or LLMClient()
        self.depth = settings.generation_depth if depth is None else depth
        self.page_size = page_size or settings.notion_block_page_size

    async def fetch_roots(self, page_ids: list[str]) -> list[PageTree]:
        """Fetch each selected root; roots that fail are logged and skipped.

        Raises:
            NoContentError: When no root could be fetched.
        """
        results = await asyncio.gather(*(self._fetch_root(pid) for pid in page_ids))
        trees = [tree for tree in results if tree is not None]
        if not trees:
            raise NoContentError(page_ids)
        logger.info(
            "Fetched %d of %d selected page trees", len(trees), len(page_ids),
        )
        return trees

    async def _fetch_root(self, page_id: str) -> Optional[PageTree]:
        try:
            return await fetch_tree(self.source, page_id, self.depth, page_size=self.page_size)
        except NotionError as e:
            logger.warning(
                "Skipping page %s: %s", page_id, e.message,
                extra={"error_code": e.error_code.value},
            )
            return None

    async def generate(self, page_ids: list[str], project_type: str) -> GenerateResponse:
        """Full pipeline: fetch, format, complete, extract.

        Raises:
            LLMNotConfiguredError: Before any Notion call when no provider is set.
            NoContentError: No selected page could be fetched.
            GenerationError: The provider call failed.
        """
        if not self.llm.is_configured():
            raise LLMNotConfiguredError()

        trees = await self.fetch_roots(page_ids)
        content = build_prompt_content(trees, project_type)
        prompt = USER_PROMPT_TEMPLATE.format(project_type=project_type, content=content)

        completion = await self.llm.complete(SYSTEM_PROMPT, prompt)
        if not completion.strip():
            raise GenerationError("The model returned an empty response")

        result = extract_files(completion)
        return GenerateResponse(
            files=result.files,
            structured=result.structured,
            strategy=result.strategy,
            message=result.message or "Code generated successfully",
            raw=result.raw,
            model=self.llm.model,
            prompt_chars=len(prompt),
            page_count=len(trees),
        )


async def check_llm(llm: Optional[LLMClient] = None) -> LLMStatusResponse:
    """Send a one-line probe to the provider and report whether it answered."""
    llm = llm or LLMClient()
    try:
        text = await llm.complete("Reply tersely.", PROBE_PROMPT, max_tokens=10)
    except (LLMNotConfiguredError, GenerationError) as e:
        return LLMStatusResponse(success=False, model=llm.model, message=e.message)
    return LLMStatusResponse(
        success=True,
        model=llm.model,
        response=text.strip(),
        message="Provider connection successful",
    )
