from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List

from revieworder.domain.schemas.diff import DiffChunk
from revieworder.domain.schemas.ordering import OrderingResult
from revieworder.exceptions.errors import OutputWriteError


def _fence_for(patch: str) -> str:
    fence = "```"
    while fence in patch:
        fence += "`"
    return fence


def _render_chunk(position: int, chunk: DiffChunk) -> List[str]:
    fence = _fence_for(chunk.patch)
    lines = [f"## {position}. {chunk.filename}", ""]
    meta = []
    if chunk.tags:
        meta.append("tags: " + ", ".join(chunk.tags))
    if chunk.priority:
        meta.append(f"priority: {chunk.priority.value}")
    if meta:
        lines += ["_" + " | ".join(meta) + "_", ""]
    lines += [f"{fence}diff", chunk.patch, fence, ""]
    return lines


def render_tag_index(groups: Dict[str, List[DiffChunk]], ordered: List[DiffChunk]) -> List[str]:
    """List each tag with the positions of its chunks in the final order."""
    position = {c.id: i for i, c in enumerate(ordered, start=1)}
    lines = ["## Tags", ""]
    for tag, chunks in groups.items():
        refs = ", ".join(str(position[c.id]) for c in chunks if c.id in position)
        lines.append(f"- {tag}: {refs}")
    return lines + [""]


def render_markdown(
    chunks: List[DiffChunk],
    title: str = "Ordered diff",
    groups: Dict[str, List[DiffChunk]] | None = None,
) -> str:
    lines = [f"# {title}", ""]
    if groups:
        lines += render_tag_index(groups, chunks)
    for i, chunk in enumerate(chunks, start=1):
        lines += _render_chunk(i, chunk)
    return "\n".join(lines).rstrip() + "\n"


def render_json(result: OrderingResult) -> str:
    doc: Dict[str, object] = {"ordered": [c.to_dict() for c in result.ordered]}
    if result.groups:
        doc["groups"] = {tag: [c.id for c in chunks] for tag, chunks in result.groups.items()}
    if result.graph is not None:
        doc["dependencies"] = result.graph.dependencies
    return json.dumps(doc, ensure_ascii=False, indent=2)


def render_result(result: OrderingResult, output_path: str | Path) -> str:
    # the body always follows result.ordered; groups only add an index
    if str(output_path).lower().endswith(".json"):
        return render_json(result)
    return render_markdown(result.ordered, groups=result.groups)


def write_output(path: str | Path, text: str) -> Path:
    p = Path(path)
    try:
        if p.parent and not p.parent.exists():
            p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(p, str(e)) from e
    return p
