from __future__ import annotations

from revieworder.config.settings import settings
from revieworder.llm.base import LLMAdapter
from revieworder.llm.ollama import OllamaAdapter
from revieworder.llm.openai_compat import OpenAICompatAdapter
from revieworder.llm.openai_native import OpenAINativeAdapter


def get_llm_adapter() -> LLMAdapter:
    if settings.llm_provider == "ollama":
        return OllamaAdapter(
            model=settings.ollama_model,
            base_url=settings.ollama_base_url,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )
    if settings.llm_provider == "openai_compat":
        return OpenAICompatAdapter(
            model=settings.openai_compat_model,
            base_url=settings.openai_compat_base_url,
            api_key=settings.openai_compat_api_key,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )
    if settings.llm_provider == "openai":
        return OpenAINativeAdapter(
            model=settings.openai_model,
            api_key=settings.openai_api_key,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )
    raise ValueError(f"Unknown llm_provider: {settings.llm_provider}")
