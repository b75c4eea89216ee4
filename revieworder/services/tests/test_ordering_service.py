"""
Tests for ordering_service.py
"""
import json
from pathlib import Path

import pytest

from revieworder.conftest import text_response, tool_response
from revieworder.domain.schemas.ordering import OrderRequest
from revieworder.exceptions.errors import StrategyNotFound
from revieworder.services.ordering_service import OrderingService


def tag_script(tag: str = "User"):
    return [
        tool_response("assign_chunk_metadata", {"chunk_id": "src/interfaces.ts", "tags": [tag], "priority": "high"}),
        text_response("ok"),
        tool_response("assign_chunk_metadata", {"chunk_id": "src/userService.ts", "tags": [tag], "priority": "low"}),
        text_response("ok"),
        tool_response("reorder", {"done": True}),
        text_response("ok"),
    ]


@pytest.mark.asyncio
async def test_order_file_writes_tagged_markdown(scripted_adapter, sample_diff, tmp_path: Path):
    """Test the tags strategy writes numbered Markdown with a tag index"""
    diff_path = tmp_path / "change.diff"
    diff_path.write_text(sample_diff)
    output = tmp_path / "out" / "ordered.md"
    service = OrderingService(adapter=scripted_adapter(*tag_script()))

    summary = await service.order_file(str(diff_path), str(output), "tags")

    assert summary["chunks"] == 2
    assert summary["groups"] == ["User"]
    text = output.read_text()
    assert "- User: 1, 2" in text
    assert text.index("## 1. src/interfaces.ts") < text.index("## 2. src/userService.ts")


@pytest.mark.asyncio
@pytest.mark.parametrize("suffix", [".md", ".json"])
async def test_order_file_keeps_untagged_chunks(scripted_adapter, sample_diff, tmp_path: Path, suffix):
    """Test every chunk is written exactly once when one chunk gets no tag"""
    diff_path = tmp_path / "change.diff"
    diff_path.write_text(sample_diff)
    output = tmp_path / f"ordered{suffix}"
    service = OrderingService(
        adapter=scripted_adapter(
            tool_response("assign_chunk_metadata", {"chunk_id": "src/interfaces.ts", "tags": ["User"], "priority": "high"}),
            text_response("ok"),
            text_response("nothing to tag"),
        )
    )

    await service.order_file(str(diff_path), str(output), "tags")

    text = output.read_text()
    if suffix == ".json":
        data = json.loads(text)
        assert [c["id"] for c in data["ordered"]] == ["src/interfaces.ts", "src/userService.ts"]
        assert data["groups"] == {"User": ["src/interfaces.ts"]}
    else:
        assert text.count("src/interfaces.ts\n") == 1
        assert text.count("src/userService.ts\n") == 1
        assert "## 2. src/userService.ts" in text


@pytest.mark.asyncio
async def test_order_unknown_strategy(scripted_adapter, sample_diff, tmp_path: Path):
    """Test a strategy with no preset raises StrategyNotFound"""
    service = OrderingService(adapter=scripted_adapter(), presets_dir=tmp_path)

    with pytest.raises(StrategyNotFound):
        await service.order(OrderRequest(diff=sample_diff, strategy="graph"))


@pytest.mark.asyncio
async def test_order_diff_tool_through_prompt(scripted_adapter, sample_diff, tmp_path: Path):
    """Test the order_diff tool runs a pipeline from a prompt"""
    diff_path = tmp_path / "change.diff"
    diff_path.write_text(sample_diff)
    output = tmp_path / "ordered.json"

    # the outer conversation asks for order_diff; the inner pipeline then
    # consumes the graph script from the same adapter
    adapter = scripted_adapter(
        tool_response(
            "order_diff",
            {"diff_path": str(diff_path), "output_path": str(output), "strategy": "graph"},
        ),
        tool_response("report_dependencies", {"chunk_id": "src/interfaces.ts", "dependencies": []}),
        text_response("ok"),
        tool_response("report_dependencies", {"chunk_id": "src/userService.ts", "dependencies": ["src/interfaces.ts"]}),
        text_response("ok"),
        text_response("All ordered."),
    )
    service = OrderingService(adapter=adapter)

    answer = await service.prompt("Order change.diff please")

    assert answer == "All ordered."
    data = json.loads(output.read_text())
    assert [c["id"] for c in data["ordered"]] == ["src/interfaces.ts", "src/userService.ts"]


def test_default_registry_tools(scripted_adapter):
    """Test the tools the service registers by default"""
    service = OrderingService(adapter=scripted_adapter())
    assert service.registry.names() == [
        "read_file",
        "list_files",
        "read_diff_file",
        "parse_diff",
        "order_diff",
    ]
