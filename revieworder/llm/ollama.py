from __future__ import annotations

from langchain_ollama import ChatOllama

from .base import LLMAdapter


class OllamaAdapter(LLMAdapter):
    def __init__(self, model: str, base_url: str, temperature: float, max_tokens: int):
        # no format="json" here: tool calls come back as structured tool_calls
        self.chat = ChatOllama(
            model=model,
            base_url=base_url,
            temperature=temperature,
            num_predict=max_tokens,
        )
        self._model = model
        self._base_url = base_url

    @property
    def provider(self) -> str:
        return "ollama"

    @property
    def model_name(self) -> str:
        return self._model

    def get_chat_model(self) -> ChatOllama:
        return self.chat
