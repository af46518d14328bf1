"""Code generation endpoints.

Endpoints are thin; GenerationService owns the fetch, format, complete and
extract pipeline.
"""

from typing import List

from fastapi import APIRouter, Depends

from ..schemas.generation import (
    ExtractRequest,
    ExtractResponse,
    FileNode,
    GenerateRequest,
    GenerateResponse,
    LLMStatusResponse,
)
from ..services.completion_parser import extract_files
from ..services.file_tree import build_file_tree
from ..services.generation_service import GenerationService, check_llm
from ..services.llm_client import LLMClient
from ..services.notion_client import NotionClient
from .deps import get_llm_client, get_notion_client

router = APIRouter(prefix="/api/ai", tags=["generation"])


@router.post("/generate", response_model=GenerateResponse)
async def generate_code(
    request: GenerateRequest,
    client: NotionClient = Depends(get_notion_client),
    llm: LLMClient = Depends(get_llm_client),
):
    """Generate project files from the selected Notion pages and their sub-pages."""
    service = GenerationService(client, llm)
    return await service.generate(request.pages, request.project_type)


@router.post("/extract", response_model=ExtractResponse)
def extract(request: ExtractRequest):
    """Run file extraction over a completion pasted by the caller."""
    result = extract_files(request.text)
    return ExtractResponse(
        files=result.files,
        structured=result.structured,
        strategy=result.strategy,
        message=result.message,
        raw=result.raw,
    )


@router.post("/file-tree", response_model=List[FileNode])
def file_tree(files: dict[str, str]):
    """Nest a flat path -> content map into the editor's directory tree."""
    return build_file_tree(files)


@router.get("/status", response_model=LLMStatusResponse)
async def llm_status(llm: LLMClient = Depends(get_llm_client)):
    """Probe the configured text-generation provider."""
    return await check_llm(llm)
