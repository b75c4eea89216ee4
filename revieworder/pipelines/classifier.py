from __future__ import annotations

import json
import logging
from typing import Dict, List, Optional

from revieworder.domain.schemas.diff import DiffChunk
from revieworder.domain.schemas.tools import AssignChunkMetadataInput
from revieworder.domain.tools.registry import Tool
from revieworder.pipelines.conversation import ConversationLoop

logger = logging.getLogger(__name__)


def assign_chunk_metadata_tool(chunks: List[DiffChunk], tags: List[str]) -> Tool:
    """
    Records (tags, priority) on the named chunk and merges new tags into the
    run-wide tag list (insertion ordered, no duplicates).
    """
    by_id = {c.id: c for c in chunks}

    async def execute(params: AssignChunkMetadataInput) -> Dict[str, object]:
        chunk = by_id.get(params.chunk_id)
        if chunk is None:
            raise ValueError(f"Unknown chunk id: {params.chunk_id}")
        chunk.assign_metadata(params.tags, params.priority)
        for tag in chunk.tags or []:
            if tag not in tags:
                tags.append(tag)
        return {"chunk_id": chunk.id, "tags": chunk.tags, "priority": chunk.priority.value}

    return Tool(
        name="assign_chunk_metadata",
        description="Associate a diff chunk with a list of tags and a priority",
        schema=AssignChunkMetadataInput,
        execute=execute,
    )


class TagClassifier:
    """
    Tags every chunk in extraction order, one conversation per chunk.
    Tags seen so far are offered to later chunks so they can be reused.
    """

    def __init__(self, loop: ConversationLoop, system_prompt: str, timeout_sec: Optional[float] = None):
        self.loop = loop
        self.system_prompt = system_prompt
        self.timeout_sec = timeout_sec

    async def classify(self, chunks: List[DiffChunk]) -> List[DiffChunk]:
        if not chunks:
            return []

        tags: List[str] = []
        tool = assign_chunk_metadata_tool(chunks, tags)

        for chunk in chunks:
            prompt = json.dumps(
                {
                    "chunk": {"id": chunk.id, "content": chunk.content, "filename": chunk.filename},
                    "existingTags": list(tags),
                },
                indent=2,
                ensure_ascii=False,
            )
            try:
                await self.loop.run_with_tools(
                    prompt,
                    self.system_prompt,
                    chunk.id,
                    tools=[tool],
                    timeout_sec=self.timeout_sec,
                )
            except Exception as e:
                logger.error("CLASSIFY_FAILED chunk=%s error=%s", chunk.id, e)
                continue

            if not chunk.is_tagged:
                logger.warning("CLASSIFY_SKIPPED chunk=%s reason=no metadata reported", chunk.id)

        tagged = [c for c in chunks if c.is_tagged]
        logger.info("CLASSIFY_DONE chunks=%d tagged=%d tags=%d", len(chunks), len(tagged), len(tags))
        return tagged


def group_by_tag(chunks: List[DiffChunk]) -> Dict[str, List[DiffChunk]]:
    groups: Dict[str, List[DiffChunk]] = {}
    for chunk in chunks:
        for tag in chunk.tags or []:
            groups.setdefault(tag, []).append(chunk)
    return groups
