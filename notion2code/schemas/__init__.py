"""Pydantic schemas for API validation."""

from .notion import (
    NotionPageSummary,
    TreeNodeSummary,
    TreeResponse,
)
from .generation import (
    GenerateRequest,
    GenerateResponse,
    ExtractRequest,
    ExtractResponse,
    LLMStatusResponse,
    FileNode,
)

__all__ = [
    "NotionPageSummary",
    "TreeNodeSummary",
    "TreeResponse",
    "GenerateRequest",
    "GenerateResponse",
    "ExtractRequest",
    "ExtractResponse",
    "LLMStatusResponse",
    "FileNode",
]
