from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from revieworder.config.settings import settings
from revieworder.core.context import run_id_var
from revieworder.domain.prompts.registry import PromptPack
from revieworder.domain.schemas.diff import DiffChunk
from revieworder.domain.schemas.ordering import OrderingResult, OrderRequest
from revieworder.domain.tools.git_diff import get_git_diff
from revieworder.domain.tools.registry import ToolRegistry
from revieworder.llm.base import LLMAdapter
from revieworder.llm.provider import get_llm_adapter
from revieworder.pipelines.conversation import ConversationLogger, ConversationLoop
from revieworder.pipelines.diff_parser import extract_chunks, read_diff_text

logger = logging.getLogger(__name__)


class OrderingPipeline(ABC):
    """
    Template Method: the outer skeleton is fixed, strategies override hooks.

    - resolve_diff(): raw text, a diff file, or a local git diff
    - order(): the strategy itself (tags / graph)
    - after_run(): optional post-processing
    """

    def __init__(
        self,
        *,
        pack: PromptPack,
        params: Dict[str, Any],
        adapter: Optional[LLMAdapter] = None,
        registry: Optional[ToolRegistry] = None,
        conversation_logger: Optional[ConversationLogger] = None,
    ):
        self.pack = pack
        self.params = params
        self.adapter = adapter
        self.registry = registry
        self.conversation_logger = conversation_logger

    @property
    def timeout_sec(self) -> Optional[float]:
        value = self.params.get("timeout_sec", settings.request_timeout_sec)
        return float(value) if value is not None else None

    def build_loop(self) -> ConversationLoop:
        adapter = self.adapter or get_llm_adapter()
        return ConversationLoop(
            adapter,
            registry=self.registry,
            conversation_logger=self.conversation_logger,
        )

    async def run(self, req: OrderRequest) -> OrderingResult:
        run_id = run_id_var.get()

        diff, source = await self.resolve_diff(req)
        chunks = extract_chunks(diff)
        logger.info("PIPELINE_CHUNKS run_id=%s source=%s chunks=%d", run_id, source, len(chunks))

        if not chunks:
            result = OrderingResult(strategy=self.strategy, chunks=[], ordered=[])
        else:
            result = await self.order(chunks, self.build_loop())

        await self.after_run(req=req, result=result)
        return result

    async def resolve_diff(self, req: OrderRequest) -> tuple[str, str]:
        """
        Returns: (diff_text, source_label)
        source_label: "raw" | "file:<path>" | "git:<target>"
        """
        if req.diff is not None:
            return req.diff, "raw"
        if req.diff_path:
            return read_diff_text(req.diff_path), f"file:{req.diff_path}"

        diff_target = (req.diff_target or self.params.get("diff_source") or "staged").strip()
        diff = get_git_diff(
            diff_target=diff_target,
            repo_path=self.params.get("repo_path"),
            context_lines=int(self.params.get("context_lines", 3)),
            max_chars=int(self.params.get("max_chars", 1_500_000)),
        )
        return diff, f"git:{diff_target}"

    @property
    @abstractmethod
    def strategy(self) -> str:
        raise NotImplementedError

    @abstractmethod
    async def order(self, chunks: List[DiffChunk], loop: ConversationLoop) -> OrderingResult:
        raise NotImplementedError

    async def after_run(self, *, req: OrderRequest, result: OrderingResult) -> None:
        return
