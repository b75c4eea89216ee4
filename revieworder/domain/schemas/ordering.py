from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from revieworder.domain.schemas.diff import DependencyGraph, DiffChunk, Priority


@dataclass
class OrderingResult:
    strategy: str
    chunks: List[DiffChunk]
    ordered: List[DiffChunk]
    groups: Dict[str, List[DiffChunk]] = field(default_factory=dict)
    graph: Optional[DependencyGraph] = None


class OrderRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    diff: Optional[str] = None
    diff_path: Optional[str] = None
    diff_target: Optional[str] = None  # "staged" | "worktree" | "A..B"
    strategy: Optional[Literal["tags", "graph"]] = None


class OrderedChunk(BaseModel):
    model_config = ConfigDict(extra="forbid")
    position: int
    id: str
    filename: str
    patch: str
    tags: List[str] = Field(default_factory=list)
    priority: Optional[Priority] = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")
    run_id: str = "unknown"
    strategy: str
    total_chunks: int
    ordered: List[OrderedChunk] = Field(default_factory=list)
    groups: Dict[str, List[str]] = Field(default_factory=dict)
    dependencies: Dict[str, List[str]] = Field(default_factory=dict)

    @classmethod
    def from_result(cls, result: OrderingResult, run_id: str = "unknown") -> "OrderResponse":
        return cls(
            run_id=run_id,
            strategy=result.strategy,
            total_chunks=len(result.chunks),
            ordered=[
                OrderedChunk(
                    position=i,
                    id=c.id,
                    filename=c.filename,
                    patch=c.patch,
                    tags=list(c.tags or []),
                    priority=c.priority,
                )
                for i, c in enumerate(result.ordered, start=1)
            ],
            groups={tag: [c.id for c in chunks] for tag, chunks in result.groups.items()},
            dependencies=dict(result.graph.dependencies) if result.graph else {},
        )


class PromptRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    prompt: str = Field(min_length=1)
    system_prompt: Optional[str] = None
    log_key: Optional[str] = None


class PromptResponse(BaseModel):
    response: str
