"""Custom exception hierarchy for notion2code."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Request errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"

    # Notion errors
    NOTION_UNAUTHORIZED = "NOTION_UNAUTHORIZED"
    NOTION_NOT_FOUND = "NOTION_NOT_FOUND"
    NOTION_API_ERROR = "NOTION_API_ERROR"
    NO_CONTENT = "NO_CONTENT"

    # Generation errors
    LLM_NOT_CONFIGURED = "LLM_NOT_CONFIGURED"
    GENERATION_FAILED = "GENERATION_FAILED"

    # Rate limiting
    RATE_LIMITED = "RATE_LIMITED"


class AppException(Exception):
    """Root of every error the API turns into a JSON response.

    ``status_code`` is the HTTP status sent to the caller, ``error_code`` the
    stable machine-readable tag, ``details`` free-form context such as the
    Notion node ID.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Response body: ``{"error", "message", "details"}``."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class ValidationError(AppException):
    """A request value that passed schema validation but cannot be used."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class MissingCredentialError(AppException):
    """No Notion token in the request and none configured."""

    def __init__(self, message: str = "Notion API key not found. Please reconnect to Notion."):
        super().__init__(
            message,
            ErrorCode.MISSING_CREDENTIAL,
            status_code=400,
        )


class NotionError(AppException):
    """Base class for failures talking to the Notion API."""


class NotionAuthError(NotionError):
    """The Notion token is invalid, expired, or lacks access (401/403)."""

    def __init__(self, node_id: str, status: int = 401):
        if status == 403:
            message = "Notion integration does not have access to this page"
        else:
            message = "Invalid Notion API key"
        super().__init__(
            message,
            ErrorCode.NOTION_UNAUTHORIZED,
            status_code=status,
            details={"node_id": node_id},
        )


class NotionNotFoundError(NotionError):
    """The requested Notion page, database, or block does not exist."""

    def __init__(self, node_id: str):
        super().__init__(
            f"Notion object not found: {node_id}",
            ErrorCode.NOTION_NOT_FOUND,
            status_code=404,
            details={"node_id": node_id},
        )


class NotionAPIError(NotionError):
    """Transport failure or unexpected Notion response."""

    def __init__(self, message: str, node_id: Optional[str] = None, status: Optional[int] = None):
        details: Dict[str, Any] = {}
        if node_id:
            details["node_id"] = node_id
        if status is not None:
            details["upstream_status"] = status
        super().__init__(
            message,
            ErrorCode.NOTION_API_ERROR,
            status_code=502,
            details=details,
        )


class NoContentError(AppException):
    """None of the selected pages could be fetched."""

    def __init__(self, page_ids: list[str]):
        super().__init__(
            "Failed to fetch content from any of the selected Notion pages",
            ErrorCode.NO_CONTENT,
            status_code=400,
            details={"pages": page_ids},
        )


class LLMNotConfiguredError(AppException):
    """Code generation requested but no model or key is configured."""

    def __init__(self):
        super().__init__(
            "Code generation is not configured. Set CHAT_MODEL and CHAT_API_KEY.",
            ErrorCode.LLM_NOT_CONFIGURED,
            status_code=503,
        )


class GenerationError(AppException):
    """The text-generation provider call failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.GENERATION_FAILED,
            status_code=502,
            details=details
        )
