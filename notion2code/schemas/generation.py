"""Code generation schemas."""

from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional


class GenerateRequest(BaseModel):
    """Schema for a code generation request."""
    pages: List[str] = Field(..., description="Root Notion page IDs to build the prompt from")
    project_type: str = Field(default="web application", max_length=200)

    @field_validator('pages')
    @classmethod
    def validate_pages(cls, v: List[str]) -> List[str]:
        pages = [p.strip() for p in v if p and p.strip()]
        if not pages:
            raise ValueError("At least one Notion page is required")
        return pages

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "pages": ["1f2e3d4c5b6a47988776655443322110"],
                    "project_type": "Next.js dashboard",
                }
            ]
        }
    }


class GenerateResponse(BaseModel):
    """Files generated from the selected pages."""
    files: Dict[str, str]
    structured: bool
    strategy: str
    message: str = ""
    raw: Optional[str] = None
    model: str
    prompt_chars: int
    page_count: int


class ExtractRequest(BaseModel):
    """Raw completion text to run through file extraction."""
    text: str


class ExtractResponse(BaseModel):
    files: Dict[str, str]
    structured: bool
    strategy: str
    message: str = ""
    raw: Optional[str] = None


class LLMStatusResponse(BaseModel):
    """Result of the provider connectivity probe."""
    success: bool
    model: str
    response: str = ""
    message: str = ""


class FileNode(BaseModel):
    """A file or directory in the generated project tree."""
    name: str
    path: str
    type: str  # "file" | "directory"
    file_type: str = ""
    content: Optional[str] = None
    children: List["FileNode"] = []


FileNode.model_rebuild()
