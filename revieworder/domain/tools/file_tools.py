"""
General-purpose tools offered to the LLM for free-form prompts.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from revieworder.domain.schemas.tools import (
    ListFilesInput,
    ParseDiffInput,
    ReadDiffFileInput,
    ReadFileInput,
)
from revieworder.domain.tools.registry import Tool
from revieworder.pipelines.diff_parser import read_diff_file, split_diff_by_lines


async def _read_file(params: ReadFileInput) -> Dict[str, Any]:
    path = Path(params.path).resolve()
    try:
        return {"content": path.read_text(encoding="utf-8", errors="replace")}
    except OSError as e:
        raise RuntimeError(f"Failed to read file: {e}") from e


async def _list_files(params: ListFilesInput) -> Dict[str, Any]:
    path = Path(params.directory).resolve()
    try:
        return {"files": sorted(p.name for p in path.iterdir())}
    except OSError as e:
        raise RuntimeError(f"Failed to list files: {e}") from e


async def _read_diff_file(params: ReadDiffFileInput) -> Dict[str, Any]:
    chunks = read_diff_file(params.path)
    return {
        "totalChunks": len(chunks),
        "chunks": [{"id": c.id, "filename": c.filename, "patch": c.patch} for c in chunks],
    }


async def _parse_diff(params: ParseDiffInput) -> Dict[str, Any]:
    pieces = split_diff_by_lines(params.diff, params.max_lines_per_chunk)
    return {"totalChunks": len(pieces), "chunks": pieces}


read_file_tool = Tool(
    name="read_file",
    description="Read the contents of a file",
    schema=ReadFileInput,
    execute=_read_file,
)

list_files_tool = Tool(
    name="list_files",
    description="List files in a directory",
    schema=ListFilesInput,
    execute=_list_files,
)

read_diff_file_tool = Tool(
    name="read_diff_file",
    description="Read a diff file and merge its hunks into one chunk per file",
    schema=ReadDiffFileInput,
    execute=_read_diff_file,
)

parse_diff_tool = Tool(
    name="parse_diff",
    description="Split a diff string into per-file pieces of bounded size",
    schema=ParseDiffInput,
    execute=_parse_diff,
)

FILE_TOOLS = [read_file_tool, list_files_tool, read_diff_file_tool, parse_diff_tool]
