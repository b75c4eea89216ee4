from __future__ import annotations

from langchain_openai import ChatOpenAI

from .base import LLMAdapter


class OpenAICompatAdapter(LLMAdapter):
    """
    For servers exposing an OpenAI-compatible `/v1/chat/completions`
    endpoint (vLLM, LM Studio, ...). The server must support tool calling.
    """
    def __init__(self, model: str, base_url: str, api_key: str, temperature: float, max_tokens: int):
        self.chat = ChatOpenAI(
            model=model,
            base_url=base_url,
            api_key=api_key,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        self._model = model
        self._base_url = base_url

    @property
    def provider(self) -> str:
        return "openai_compat"

    @property
    def model_name(self) -> str:
        return self._model

    def get_chat_model(self) -> ChatOpenAI:
        return self.chat
