from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Sequence

from langchain_core.language_models.chat_models import BaseChatModel

from revieworder.llm.messages import (
    EngineResponse,
    Message,
    ToolSpec,
    from_langchain_response,
    to_langchain_messages,
)


class LLMAdapter(ABC):
    @property
    @abstractmethod
    def provider(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def model_name(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def get_chat_model(self) -> BaseChatModel:
        raise NotImplementedError

    async def acomplete(
        self,
        *,
        system: str,
        transcript: Sequence[Message],
        tools: Sequence[ToolSpec],
    ) -> EngineResponse:
        """
        One engine round: transcript + declared tools in, content blocks out.
        """
        chat = self.get_chat_model()
        runnable = chat.bind_tools([t.to_openai_tool() for t in tools]) if tools else chat
        res = await runnable.ainvoke(to_langchain_messages(system, transcript))
        return from_langchain_response(res)
