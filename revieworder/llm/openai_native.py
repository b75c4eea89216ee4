"""
Native OpenAI API adapter for GPT models.

Use this for the official OpenAI API (GPT-4o, GPT-4.1, etc.)
"""

from __future__ import annotations

from langchain_openai import ChatOpenAI

from .base import LLMAdapter


class OpenAINativeAdapter(LLMAdapter):
    """
    Uses the official OpenAI API endpoint (https://api.openai.com/v1).
    Requires OPENAI_API_KEY environment variable or explicit api_key.
    """

    def __init__(
        self,
        model: str = "gpt-4o",
        api_key: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 4096,
    ):
        self.chat = ChatOpenAI(
            model=model,
            api_key=api_key,  # None -> OPENAI_API_KEY
            temperature=temperature,
            max_tokens=max_tokens,
        )
        self._model = model

    @property
    def provider(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model

    def get_chat_model(self) -> ChatOpenAI:
        """Return ChatOpenAI instance for direct use."""
        return self.chat
