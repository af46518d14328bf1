"""API routes."""

from .notion import router as notion_router
from .generate import router as generate_router

__all__ = [
    "notion_router",
    "generate_router",
]
