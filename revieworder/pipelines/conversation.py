"""
Conversational tool-execution loop.

A two-state machine (AWAITING_ENGINE -> DONE) around the reasoning engine:
send transcript + tools, execute any requested tool calls, feed the results
back as one user turn, repeat until the engine answers without tools.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol, Sequence

from revieworder.domain.tools.registry import Tool, ToolRegistry, ToolResult
from revieworder.exceptions.errors import ConversationCancelledError, ToolError
from revieworder.llm.base import LLMAdapter
from revieworder.llm.invoke import invoke_engine
from revieworder.llm.messages import Message, ToolResultBlock, ToolUseBlock

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."
NO_TEXT_RESPONSE = "No text response"


class ConversationLogger(Protocol):
    async def log(
        self, transcript: Sequence[Message], system_prompt: str, log_key: Optional[str]
    ) -> None: ...


class LoopState(str, Enum):
    awaiting_engine = "awaiting_engine"
    done = "done"


@dataclass
class ConversationResult:
    answer: str
    transcript: List[Message] = field(default_factory=list)
    engine_calls: int = 0
    tool_calls: int = 0


class ConversationLoop:
    def __init__(
        self,
        adapter: LLMAdapter,
        registry: Optional[ToolRegistry] = None,
        conversation_logger: Optional[ConversationLogger] = None,
    ):
        self.adapter = adapter
        self.registry = registry if registry is not None else ToolRegistry()
        self.conversation_logger = conversation_logger

    async def run_with_tools(
        self,
        prompt: str,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        log_key: Optional[str] = None,
        tools: Sequence[Tool] = (),
        timeout_sec: Optional[float] = None,
    ) -> str:
        result = await self.run(
            prompt,
            system_prompt=system_prompt,
            log_key=log_key,
            tools=tools,
            timeout_sec=timeout_sec,
        )
        return result.answer

    async def run(
        self,
        prompt: str,
        *,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        log_key: Optional[str] = None,
        tools: Sequence[Tool] = (),
        timeout_sec: Optional[float] = None,
    ) -> ConversationResult:
        # scoped tools live on a per-call fork so the shared registry never sees them
        registry = self.registry.fork()
        for tool in tools:
            registry.register(tool)
        try:
            coro = self._loop(registry, prompt, system_prompt or DEFAULT_SYSTEM_PROMPT, log_key)
            if timeout_sec is None:
                return await coro
            try:
                return await asyncio.wait_for(coro, timeout=timeout_sec)
            except asyncio.TimeoutError as e:
                raise ConversationCancelledError(
                    f"Conversation timed out after {timeout_sec}s (key={log_key})"
                ) from e
        finally:
            for tool in tools:
                registry.unregister(tool.name)

    async def _loop(
        self,
        registry: ToolRegistry,
        prompt: str,
        system_prompt: str,
        log_key: Optional[str],
    ) -> ConversationResult:
        transcript: List[Message] = [Message(role="user", content=prompt)]
        result = ConversationResult(answer=NO_TEXT_RESPONSE, transcript=transcript)
        tool_specs = registry.describe_all()
        state = LoopState.awaiting_engine

        while state is LoopState.awaiting_engine:
            response = await invoke_engine(
                self.adapter,
                system=system_prompt,
                transcript=list(transcript),
                tools=tool_specs,
            )
            result.engine_calls += 1

            calls = response.tool_uses()
            if not calls:
                state = LoopState.done
                result.answer = response.first_text() or NO_TEXT_RESPONSE
                break

            logger.info(
                "TOOL_CALLS key=%s round=%d tools=%s",
                log_key,
                result.engine_calls,
                [c.name for c in calls],
            )
            results = [await self._execute(registry, call) for call in calls]
            result.tool_calls += len(results)

            # engine turn goes in only together with its results
            transcript.append(Message(role="assistant", content=list(response.content)))
            transcript.append(Message(role="user", content=results))

        if self.conversation_logger is not None:
            await self.conversation_logger.log(list(transcript), system_prompt, log_key)
        return result

    async def _execute(self, registry: ToolRegistry, call: ToolUseBlock) -> ToolResultBlock:
        try:
            outcome = await registry.invoke(call.name, call.input)
        except ToolError as e:
            logger.warning("TOOL_REJECTED tool=%s id=%s error=%s", call.name, call.id, e)
            outcome = ToolResult.error(call.name, str(e))
        return ToolResultBlock(
            tool_use_id=call.id,
            content=outcome.content,
            is_error=outcome.is_error,
        )
