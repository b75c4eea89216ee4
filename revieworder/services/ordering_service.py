from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from revieworder.config.settings import settings
from revieworder.domain.prompts.registry import PromptPackRegistry
from revieworder.domain.schemas.ordering import OrderingResult, OrderRequest
from revieworder.domain.schemas.tools import OrderDiffInput
from revieworder.domain.tools.file_tools import FILE_TOOLS
from revieworder.domain.tools.registry import Tool, ToolRegistry
from revieworder.llm.base import LLMAdapter
from revieworder.llm.provider import get_llm_adapter
from revieworder.pipelines.conversation import (
    DEFAULT_SYSTEM_PROMPT,
    ConversationLogger,
    ConversationLoop,
)
from revieworder.pipelines.registry import PipelineRegistry
from revieworder.services.conversation_log import FileConversationLogger
from revieworder.services.export import render_result, write_output

logger = logging.getLogger(__name__)


def default_conversation_logger() -> Optional[ConversationLogger]:
    if settings.log_directory is None:
        return None
    return FileConversationLogger(settings.log_directory)


class OrderingService:
    """
    Thin facade.

    - strategy -> preset -> pipeline
    - pipeline.run(req)
    - render + write the review document

    Each run gets its own pipeline and conversation loop; the base tool
    registry is only ever forked, never mutated, by a run.
    """

    def __init__(
        self,
        *,
        adapter: Optional[LLMAdapter] = None,
        registry: Optional[ToolRegistry] = None,
        conversation_logger: Optional[ConversationLogger] = None,
        packs_dir: Optional[Path] = None,
        presets_dir: Optional[Path] = None,
    ) -> None:
        self._adapter = adapter
        self._conversation_logger = conversation_logger
        self._prompt_registry = PromptPackRegistry(
            packs_dir=packs_dir or settings.prompt_packs_dir,
            default_pack=settings.default_pack,
        )
        self._pipeline_registry = PipelineRegistry(presets_dir=presets_dir or settings.presets_dir)
        # tools for free-form prompts; ordering pipelines only use scoped tools
        self.registry = registry if registry is not None else build_default_registry(self)

    @property
    def adapter(self) -> LLMAdapter:
        if self._adapter is None:
            self._adapter = get_llm_adapter()
        return self._adapter

    async def prompt(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        log_key: Optional[str] = None,
    ) -> str:
        loop = ConversationLoop(self.adapter, registry=self.registry, conversation_logger=self._conversation_logger)
        return await loop.run_with_tools(
            prompt,
            system_prompt or DEFAULT_SYSTEM_PROMPT,
            log_key,
            timeout_sec=settings.request_timeout_sec,
        )

    async def order(self, req: OrderRequest) -> OrderingResult:
        strategy = req.strategy or settings.default_strategy
        pack = self._prompt_registry.get(None)
        spec = self._pipeline_registry.load_spec(strategy)
        pipeline = self._pipeline_registry.build_pipeline(
            spec,
            pack=pack,
            adapter=self.adapter,
            conversation_logger=self._conversation_logger,
        )

        logger.info("PIPELINE_START strategy=%s pack=%s pipeline=%s", strategy, pack.id, spec.pipeline)
        result = await pipeline.run(req)
        logger.info(
            "PIPELINE_DONE strategy=%s chunks=%d groups=%d",
            strategy,
            len(result.chunks),
            len(result.groups),
        )
        return result

    async def order_file(self, diff_path: str, output_path: str, strategy: Optional[str] = None) -> Dict[str, Any]:
        result = await self.order(OrderRequest(diff_path=diff_path, strategy=strategy))
        written = write_output(output_path, render_result(result, output_path))
        return {
            "message": f"Ordered results saved to {written}",
            "output_path": str(written),
            "chunks": len(result.chunks),
            "groups": list(result.groups),
        }


def order_diff_tool(service: OrderingService) -> Tool:
    async def execute(params: OrderDiffInput) -> Dict[str, Any]:
        return await service.order_file(params.diff_path, params.output_path, params.strategy)

    return Tool(
        name="order_diff",
        description="Order the chunks of a git diff file for review and write the result to a file",
        schema=OrderDiffInput,
        execute=execute,
    )


def build_default_registry(service: OrderingService) -> ToolRegistry:
    registry = ToolRegistry(list(FILE_TOOLS))
    registry.register(order_diff_tool(service))
    return registry
