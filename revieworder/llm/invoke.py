from __future__ import annotations

from typing import Sequence

import httpx

from revieworder.exceptions.errors import EngineUnavailableError
from revieworder.llm.base import LLMAdapter
from revieworder.llm.messages import EngineResponse, Message, ToolSpec


async def invoke_engine(
    adapter: LLMAdapter,
    *,
    system: str,
    transcript: Sequence[Message],
    tools: Sequence[ToolSpec],
) -> EngineResponse:
    try:
        return await adapter.acomplete(system=system, transcript=transcript, tools=tools)
    except (httpx.ConnectError, httpx.ReadTimeout, ConnectionError) as e:
        raise EngineUnavailableError("LLM backend is unavailable") from e
