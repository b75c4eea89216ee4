"""
Per-tag iterative reordering.

Each tag group is shown to the engine in its current order; the engine either
proposes a new order or declares the current one final. Rounds are bounded.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from revieworder.domain.schemas.diff import DiffChunk, Dropped, OrderingState, Resolved, resolve_ids
from revieworder.domain.schemas.tools import ReorderInput
from revieworder.domain.tools.registry import Tool
from revieworder.pipelines.conversation import ConversationLoop

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROUNDS = 5


def apply_reordering(state: OrderingState, ids: List[str]) -> Dict[str, List[str]]:
    """
    Replace state.chunks with the chunks named by `ids`.

    Unknown or repeated ids are dropped. Chunks the engine left out keep
    their previous relative order at the end, so a group never loses members.
    """
    resolutions = resolve_ids(ids, state.chunks)
    ordered = [r.chunk for r in resolutions if isinstance(r, Resolved)]
    dropped = [r.id for r in resolutions if isinstance(r, Dropped)]

    placed = {c.id for c in ordered}
    missing = [c for c in state.chunks if c.id not in placed]
    state.chunks = ordered + missing

    return {
        "order": [c.id for c in state.chunks],
        "dropped": dropped,
        "appended": [c.id for c in missing],
    }


def reorder_tool(state: OrderingState) -> Tool:
    async def execute(params: ReorderInput) -> Dict[str, object]:
        if params.done:
            state.done = True
            return {"done": True, "order": [c.id for c in state.chunks]}
        result = apply_reordering(state, params.order)
        if result["dropped"]:
            logger.info("REORDER_DROPPED ids=%s", result["dropped"])
        return {"done": False, **result}

    return Tool(
        name="reorder",
        description="Reorder a list of diff chunks, or confirm the current order with done=true",
        schema=ReorderInput,
        execute=execute,
    )


def build_reorder_prompt(tag: str, chunks: List[DiffChunk]) -> str:
    lines = [f"All of the following chunks are related to {tag}"]
    for chunk in chunks:
        lines.append(f'<diff id="{chunk.id}">{chunk.patch}</diff>')
    return "\n".join(lines) + "\n"


class TagReorderer:
    def __init__(
        self,
        loop: ConversationLoop,
        system_prompt: str,
        max_rounds: int = DEFAULT_MAX_ROUNDS,
        timeout_sec: Optional[float] = None,
    ):
        self.loop = loop
        self.system_prompt = system_prompt
        self.max_rounds = max(1, int(max_rounds))
        self.timeout_sec = timeout_sec

    async def order_group(self, tag: str, chunks: List[DiffChunk]) -> List[DiffChunk]:
        state = OrderingState(chunks=list(chunks))
        if len(state.chunks) < 2:
            return state.chunks

        tool = reorder_tool(state)
        rounds = 0
        while not state.done and rounds < self.max_rounds:
            rounds += 1
            try:
                await self.loop.run_with_tools(
                    build_reorder_prompt(tag, state.chunks),
                    self.system_prompt,
                    f"reordering-{tag}-{rounds}",
                    tools=[tool],
                    timeout_sec=self.timeout_sec,
                )
            except Exception as e:
                logger.error("REORDER_FAILED tag=%s round=%d error=%s", tag, rounds, e)
                break

        if not state.done and rounds >= self.max_rounds:
            logger.warning(
                "REORDER_BUDGET_EXHAUSTED tag=%s rounds=%d; keeping last order", tag, rounds
            )
        return state.chunks

    async def order_groups(self, groups: Dict[str, List[DiffChunk]]) -> Dict[str, List[DiffChunk]]:
        ordered: Dict[str, List[DiffChunk]] = {}
        for tag, chunks in groups.items():
            logger.info("Ordering diffs for tag: %s (%d chunks)", tag, len(chunks))
            ordered[tag] = await self.order_group(tag, chunks)
        return ordered
