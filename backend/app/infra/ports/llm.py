from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class LLMPort(ABC):
    provider_name = "llm"
    model_name = "unknown"

    @abstractmethod
    def generate_text(
        self,
        *,
        prompt: str,
        schema: dict[str, Any] | None = None,
        system_prompt: str | None = None,
        model: str | None = None,
    ) -> str:
        """Return the raw text of the model's answer to a text-only prompt."""

    def generate_text_from_media(
        self,
        *,
        prompt: str,
        media_base64: str,
        media_mime_type: str,
        schema: dict[str, Any] | None = None,
        system_prompt: str | None = None,
        model: str | None = None,
    ) -> str:
        """Optional multimodal generation over a base64 attachment. Providers may override."""
        raise NotImplementedError("This LLM provider does not support media input.")
