from __future__ import annotations

from typing import List

from revieworder.config.settings import settings
from revieworder.domain.schemas.diff import DiffChunk
from revieworder.domain.schemas.ordering import OrderingResult
from revieworder.pipelines.base import OrderingPipeline
from revieworder.pipelines.conversation import ConversationLoop
from revieworder.pipelines.dependency_graph import DependencyGraphBuilder, topological_sort


class GraphOrderingPipeline(OrderingPipeline):
    """
    graph: ask for each chunk's dependencies on earlier chunks, then emit a
    cycle-tolerant topological order over the whole diff.
    """

    @property
    def strategy(self) -> str:
        return "graph"

    async def order(self, chunks: List[DiffChunk], loop: ConversationLoop) -> OrderingResult:
        builder = DependencyGraphBuilder(
            loop,
            self.pack.dependency_system,
            preview_max_chars=int(self.params.get("preview_max_chars", settings.preview_max_chars)),
            timeout_sec=self.timeout_sec,
        )
        graph = await builder.build(chunks)
        return OrderingResult(
            strategy=self.strategy,
            chunks=chunks,
            ordered=topological_sort(graph),
            graph=graph,
        )
