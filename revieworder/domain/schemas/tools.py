from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field

from revieworder.domain.schemas.diff import Priority


class AssignChunkMetadataInput(BaseModel):
    chunk_id: str = Field(min_length=1, description="The ID of the diff chunk being tagged")
    tags: List[str] = Field(description="The list of tags to associate with this chunk")
    priority: Priority = Field(
        description=(
            "How impactful the change is compared to mechanical edits, generated files "
            "or downstream adaptations to an interface change. Use 'unknown' when uncertain."
        )
    )


class ReportDependenciesInput(BaseModel):
    chunk_id: str = Field(
        min_length=1, description="The ID of the diff chunk whose dependencies are being reported"
    )
    dependencies: List[str] = Field(
        default_factory=list, description="IDs of earlier chunks this chunk depends on"
    )


class ReorderInput(BaseModel):
    order: List[str] = Field(
        default_factory=list,
        description="IDs of the chunks in the order they should be reviewed to be most intelligible",
    )
    done: bool = Field(
        default=False,
        description="true if the order given in the prompt is already the best linear ordering",
    )


class ReadFileInput(BaseModel):
    path: str = Field(min_length=1, description="The path to the file to read")


class ListFilesInput(BaseModel):
    directory: str = Field(default=".", description="The directory path to list files from")


class ReadDiffFileInput(BaseModel):
    path: str = Field(min_length=1, description="The path to the diff file")


class ParseDiffInput(BaseModel):
    diff: str = Field(min_length=1, description="The diff string to parse")
    max_lines_per_chunk: int = Field(
        default=100, ge=1, le=500, description="Maximum changed lines per piece"
    )


class OrderDiffInput(BaseModel):
    diff_path: str = Field(min_length=1, description="Path to the input diff file")
    output_path: str = Field(min_length=1, description="Path to write the ordered review document")
    strategy: Literal["tags", "graph"] = Field(
        default="tags", description="'tags' for per-tag ordering, 'graph' for a global dependency order"
    )
