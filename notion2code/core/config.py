"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


class Settings(BaseSettings):
    """
    Application settings with validation.

    Values come from environment variables (case-insensitive) or a
    ``.env`` file in the working directory.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # Notion Configuration
    # NOTION_API_KEY is only a fallback: requests normally carry their own
    # integration token in the Notion-API-Key header.
    notion_api_key: str = Field(
        default="",
        description="Fallback Notion integration token"
    )
    notion_api_url: str = Field(
        default="https://api.notion.com/v1",
        description="Notion REST API base URL"
    )
    notion_version: str = Field(
        default="2022-06-28",
        description="Value sent in the Notion-Version header"
    )
    notion_timeout: float = Field(
        default=30.0,
        description="Per-request timeout in seconds for Notion calls"
    )
    notion_block_page_size: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Blocks requested per node (first page only, never paginated)"
    )

    # Tree traversal
    fetch_depth: int = Field(
        default=2,
        ge=0,
        description="Default sub-page depth for the tree inspection endpoint"
    )
    generation_depth: int = Field(
        default=3,
        ge=0,
        description="Sub-page depth used when assembling generation prompts"
    )

    # Chat / code generation
    # LiteLLM model string. Empty string = generation disabled.
    chat_model: str = Field(
        default="anthropic/claude-3-5-haiku-20241022",
        description="LiteLLM model used for code generation"
    )
    chat_api_key: str = Field(
        default="",
        description="API key for the chat provider (e.g. ANTHROPIC key)"
    )
    chat_api_base: str = Field(
        default="",
        description="Base URL for chat provider (optional, for custom endpoints)"
    )
    chat_max_tokens: int = Field(
        default=4000,
        description="Maximum completion tokens per generation request"
    )
    chat_temperature: float = Field(
        default=0.2,
        description="Sampling temperature for generation"
    )
    chat_timeout: float = Field(
        default=120.0,
        description="Seconds to wait for a completion"
    )

    # Rate Limiting
    # RATE_LIMIT_PER_MINUTE: max requests per client per minute (0 = disabled).
    rate_limit_per_minute: int = Field(
        default=60,
        description="Maximum requests per client per minute"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        # SECURITY: Prevent wildcard CORS
        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    def chat_configured(self) -> bool:
        """Generation needs both a model and a provider key."""
        return bool(self.chat_model and self.chat_api_key)

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in ('json', 'text'):
            raise ValueError("Invalid log format. Must be 'json' or 'text'")
        return v_lower

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        In production, fails startup if settings would leave the service
        unusable or exposed. In development, returns silently so main.py can
        log warnings instead.

        Raises:
            ConfigurationError: If production config is invalid.
        """
        errors: list[str] = []

        if not self.chat_configured():
            errors.append(
                "CHAT_MODEL or CHAT_API_KEY is empty. "
                "Code generation is disabled without both."
            )

        origins = self.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            errors.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is invalid:\n  - " + "\n  - ".join(errors)
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
