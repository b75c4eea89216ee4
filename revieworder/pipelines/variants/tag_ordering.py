from __future__ import annotations

from typing import Dict, List

from revieworder.config.settings import settings
from revieworder.domain.schemas.diff import DiffChunk
from revieworder.domain.schemas.ordering import OrderingResult
from revieworder.pipelines.base import OrderingPipeline
from revieworder.pipelines.classifier import TagClassifier, group_by_tag
from revieworder.pipelines.conversation import ConversationLoop
from revieworder.pipelines.reorder import TagReorderer


def flatten_groups(groups: Dict[str, List[DiffChunk]], chunks: List[DiffChunk]) -> List[DiffChunk]:
    """
    Single review sequence: groups in tag order, each chunk at its first
    appearance, untagged chunks last in extraction order.
    """
    seen: set[str] = set()
    out: List[DiffChunk] = []
    for members in groups.values():
        for chunk in members:
            if chunk.id not in seen:
                seen.add(chunk.id)
                out.append(chunk)
    out.extend(c for c in chunks if c.id not in seen)
    return out


class TagOrderingPipeline(OrderingPipeline):
    """
    tags: classify every chunk, group by tag, then let the LLM refine the
    order inside each group.
    """

    @property
    def strategy(self) -> str:
        return "tags"

    async def order(self, chunks: List[DiffChunk], loop: ConversationLoop) -> OrderingResult:
        classifier = TagClassifier(loop, self.pack.tagging_system, timeout_sec=self.timeout_sec)
        tagged = await classifier.classify(chunks)

        reorderer = TagReorderer(
            loop,
            self.pack.reorder_system,
            max_rounds=int(self.params.get("max_rounds", settings.reorder_max_rounds)),
            timeout_sec=self.timeout_sec,
        )
        groups = await reorderer.order_groups(group_by_tag(tagged))

        return OrderingResult(
            strategy=self.strategy,
            chunks=chunks,
            ordered=flatten_groups(groups, chunks),
            groups=groups,
        )
