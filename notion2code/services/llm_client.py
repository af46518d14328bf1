"""Text-generation collaborator backed by LiteLLM."""

import logging
from typing import Any, Optional

import litellm

from ..core.config import settings
from ..core.logging_config import mask_secret
from ..exceptions import GenerationError, LLMNotConfiguredError

logger = logging.getLogger(__name__)


class LLMClient:
    """Sends a system instruction plus one user prompt and returns the completion text."""

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
    ):
        self.model = model if model is not None else settings.chat_model
        self.api_key = api_key if api_key is not None else settings.chat_api_key
        self.api_base = api_base if api_base is not None else settings.chat_api_base

    def is_configured(self) -> bool:
        return bool(self.model and self.api_key)

    async def complete(
        self,
        system: str,
        prompt: str,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Run one completion.

        Raises:
            LLMNotConfiguredError: No model or API key.
            GenerationError: The provider call failed.
        """
        if not self.is_configured():
            raise LLMNotConfiguredError()

        kwargs: dict[str, Any] = {
            "model": self.model,
            "api_key": self.api_key,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": max_tokens or settings.chat_max_tokens,
            "temperature": settings.chat_temperature,
            "timeout": settings.chat_timeout,
        }
        if self.api_base:
            kwargs["api_base"] = self.api_base

        logger.info(
            "Requesting completion",
            extra={"model": self.model, "key": mask_secret(self.api_key), "prompt_chars": len(prompt)},
        )
        try:
            response = await litellm.acompletion(**kwargs)
        except Exception as e:
            logger.exception("Completion request failed")
            raise GenerationError("Failed to generate code", original_error=e) from e

        return _completion_text(response)


def _completion_text(response: Any) -> str:
    """Join the text of every choice's message content."""
    parts: list[str] = []
    for choice in getattr(response, "choices", None) or []:
        content = getattr(getattr(choice, "message", None), "content", None)
        if isinstance(content, str):
            parts.append(content)
        elif isinstance(content, list):
            # Provider-native content blocks: keep the text ones.
            parts.extend(
                block.get("text", "") for block in content
                if isinstance(block, dict) and block.get("type") == "text"
            )
    return "".join(parts)
