from __future__ import annotations

import json
import logging
from typing import Dict, List, Optional, Set

from revieworder.domain.schemas.diff import DependencyGraph, DiffChunk
from revieworder.domain.schemas.tools import ReportDependenciesInput
from revieworder.domain.tools.registry import Tool
from revieworder.pipelines.conversation import ConversationLoop

logger = logging.getLogger(__name__)


def truncate_content(content: str, max_length: int = 200) -> str:
    if len(content) <= max_length:
        return content
    return content[:max_length] + "..."


def clean_dependencies(chunk_id: str, reported: List[str], known_ids: Set[str]) -> List[str]:
    """Keep known ids only, in reported order, without self references or repeats."""
    out: List[str] = []
    for dep in reported:
        dep = str(dep).strip()
        if dep == chunk_id or dep not in known_ids or dep in out:
            continue
        out.append(dep)
    return out


def report_dependencies_tool(graph: DependencyGraph, current: Dict[str, str], earlier_ids: Set[str]) -> Tool:
    """
    `current["id"]` is the chunk under analysis; reports for any other chunk
    are rejected so the engine can correct itself. Only ids in `earlier_ids`
    (chunks already processed) are kept as dependencies.
    """

    async def execute(params: ReportDependenciesInput) -> Dict[str, object]:
        expected = current.get("id")
        if params.chunk_id != expected:
            raise ValueError(f"Expected dependencies for chunk {expected}, got {params.chunk_id}")
        deps = clean_dependencies(params.chunk_id, params.dependencies, earlier_ids)
        ignored = [d for d in params.dependencies if d not in deps]
        if ignored:
            logger.info("DEPS_FILTERED chunk=%s ignored=%s", params.chunk_id, ignored)
        graph.dependencies[params.chunk_id] = deps
        return {"chunk_id": params.chunk_id, "dependencies": deps, "ignored": ignored}

    return Tool(
        name="report_dependencies",
        description="Report the dependencies of a diff chunk",
        schema=ReportDependenciesInput,
        execute=execute,
    )


class DependencyGraphBuilder:
    def __init__(
        self,
        loop: ConversationLoop,
        system_prompt: str,
        preview_max_chars: int = 200,
        timeout_sec: Optional[float] = None,
    ):
        self.loop = loop
        self.system_prompt = system_prompt
        self.preview_max_chars = preview_max_chars
        self.timeout_sec = timeout_sec

    async def build(self, chunks: List[DiffChunk]) -> DependencyGraph:
        graph = DependencyGraph(nodes=list(chunks))
        if not chunks:
            return graph

        current: Dict[str, str] = {}
        processed: List[DiffChunk] = []
        processed_ids: Set[str] = set()
        tool = report_dependencies_tool(graph, current, processed_ids)

        for chunk in chunks:
            current["id"] = chunk.id
            prompt = json.dumps(
                {
                    "chunk": {"id": chunk.id, "content": chunk.content, "filename": chunk.filename},
                    "existingNodes": [
                        {
                            "id": node.id,
                            "content": truncate_content(node.content, self.preview_max_chars),
                            "filename": node.filename,
                        }
                        for node in processed
                    ],
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
                logger.error("DEPS_FAILED chunk=%s error=%s", chunk.id, e)
                graph.dependencies[chunk.id] = []
                continue

            graph.dependencies.setdefault(chunk.id, [])
            processed.append(chunk)
            processed_ids.add(chunk.id)

        logger.info(
            "DEPS_DONE nodes=%d edges=%d",
            len(graph.nodes),
            sum(len(v) for v in graph.dependencies.values()),
        )
        return graph


def topological_sort(graph: DependencyGraph) -> List[DiffChunk]:
    """
    Dependencies before dependents. A dependency that is still in progress
    on the current walk closes a cycle; that back edge is skipped.
    """
    node_map = {n.id: n for n in graph.nodes}
    node_ids = [n.id for n in graph.nodes]

    indegree: Dict[str, int] = {nid: 0 for nid in node_ids}
    for nid in node_ids:
        for dep in graph.dependencies.get(nid, []):
            if dep in indegree:
                indegree[dep] += 1

    visited: Set[str] = set()
    in_progress: Set[str] = set()
    order: List[DiffChunk] = []

    def visit(nid: str) -> None:
        # iterative DFS so long dependency chains cannot hit the recursion limit
        stack = [(nid, iter(graph.dependencies.get(nid, [])))]
        in_progress.add(nid)
        while stack:
            current, deps = stack[-1]
            for dep in deps:
                if dep not in node_map or dep in visited:
                    continue
                if dep in in_progress:
                    logger.warning("Cycle detected at node %s. Breaking cycle.", dep)
                    continue
                in_progress.add(dep)
                stack.append((dep, iter(graph.dependencies.get(dep, []))))
                break
            else:
                stack.pop()
                in_progress.discard(current)
                visited.add(current)
                order.append(node_map[current])

    # stable sort: ties keep extraction order
    for nid in sorted(node_ids, key=lambda i: indegree[i]):
        if nid not in visited:
            visit(nid)

    return order
