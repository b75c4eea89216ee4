"""
Tests for dependency_graph.py
"""
import json
import logging

import pytest

from revieworder.conftest import text_response, tool_response
from revieworder.domain.schemas.diff import DependencyGraph, DiffChunk
from revieworder.pipelines.conversation import ConversationLoop
from revieworder.pipelines.dependency_graph import (
    DependencyGraphBuilder,
    clean_dependencies,
    topological_sort,
    truncate_content,
)
from revieworder.pipelines.diff_parser import extract_chunks


def chunk(cid: str) -> DiffChunk:
    return DiffChunk(id=cid, filename=cid, content=f"content of {cid}", patch="")


def report(chunk_id, deps):
    return tool_response("report_dependencies", {"chunk_id": chunk_id, "dependencies": deps})


def ids(chunks):
    return [c.id for c in chunks]


class TestHelpers:
    """Test graph helpers"""

    def test_truncate_content(self):
        """Test truncate content"""
        assert truncate_content("abc", 5) == "abc"
        assert truncate_content("abcdef", 3) == "abc..."

    def test_clean_dependencies(self):
        """Test clean dependencies"""
        known = {"a", "b", "c"}
        assert clean_dependencies("c", ["a", "c", "x", "a", " b "], known) == ["a", "b"]


class TestTopologicalSort:
    """Test topological sort"""

    def test_dependencies_come_first(self):
        """Test dependencies come first"""
        nodes = [chunk("a"), chunk("b"), chunk("c")]
        graph = DependencyGraph(nodes=nodes, dependencies={"b": ["a"], "c": ["b"]})

        assert ids(topological_sort(graph)) == ["a", "b", "c"]

    def test_interfaces_before_implementations(self):
        """Test interfaces before implementations"""
        nodes = [chunk("userRepository.ts"), chunk("interfaces.ts"), chunk("userService.ts")]
        graph = DependencyGraph(
            nodes=nodes,
            dependencies={
                "userRepository.ts": ["interfaces.ts"],
                "userService.ts": ["interfaces.ts"],
            },
        )

        order = ids(topological_sort(graph))

        assert order[0] == "interfaces.ts"
        assert sorted(order[1:]) == ["userRepository.ts", "userService.ts"]

    def test_cycle_is_broken_not_rejected(self, caplog):
        """Test cycle is broken not rejected"""
        nodes = [chunk("a"), chunk("b"), chunk("c")]
        graph = DependencyGraph(nodes=nodes, dependencies={"a": ["b"], "b": ["c"], "c": ["a"]})

        with caplog.at_level(logging.WARNING):
            order = ids(topological_sort(graph))

        assert sorted(order) == ["a", "b", "c"]
        assert "Breaking cycle" in caplog.text

    def test_unknown_ids_and_missing_entries_ignored(self):
        """Test unknown ids and missing entries ignored"""
        nodes = [chunk("a"), chunk("b")]
        graph = DependencyGraph(nodes=nodes, dependencies={"b": ["ghost", "a"]})

        assert ids(topological_sort(graph)) == ["a", "b"]

    def test_every_node_once_without_edges(self):
        """Test every node once without edges"""
        nodes = [chunk(str(i)) for i in range(5)]
        assert ids(topological_sort(DependencyGraph(nodes=nodes))) == ["0", "1", "2", "3", "4"]

    def test_long_chain(self):
        """Test long chain"""
        nodes = [chunk(f"n{i}") for i in range(3000)]
        deps = {f"n{i}": [f"n{i - 1}"] for i in range(1, 3000)}

        order = ids(topological_sort(DependencyGraph(nodes=nodes, dependencies=deps)))

        assert order == [n.id for n in nodes]


class TestDependencyGraphBuilder:
    """Test dependency graph builder"""

    @pytest.mark.asyncio
    async def test_builds_graph(self, scripted_adapter, sample_diff):
        """Test builds graph"""
        chunks = extract_chunks(sample_diff)
        adapter = scripted_adapter(
            report("src/interfaces.ts", []),
            text_response("ok"),
            report("src/userService.ts", ["src/interfaces.ts", "src/userService.ts", "ghost.ts"]),
            text_response("ok"),
        )
        builder = DependencyGraphBuilder(ConversationLoop(adapter), "deps system", preview_max_chars=10)

        graph = await builder.build(chunks)

        assert graph.dependencies == {
            "src/interfaces.ts": [],
            "src/userService.ts": ["src/interfaces.ts"],
        }
        second = json.loads(adapter.calls[2]["transcript"][0].content)
        assert [n["id"] for n in second["existingNodes"]] == ["src/interfaces.ts"]
        assert second["existingNodes"][0]["content"].endswith("...")

    @pytest.mark.asyncio
    async def test_report_for_other_chunk_rejected(self, scripted_adapter):
        """Test report for other chunk rejected"""
        chunks = [chunk("a"), chunk("b")]
        adapter = scripted_adapter(report("b", ["a"]), text_response("ok"))

        graph = await DependencyGraphBuilder(ConversationLoop(adapter), "sys").build(chunks)

        assert adapter.calls[1]["transcript"][2].blocks()[0].is_error
        assert graph.dependencies["a"] == []
        assert graph.dependencies["b"] == []

    @pytest.mark.asyncio
    async def test_failed_chunk_is_not_offered_later(self, scripted_adapter):
        """Test failed chunk is not offered later"""
        def explode(transcript, tools):
            raise RuntimeError("engine crashed")

        chunks = [chunk("a"), chunk("b")]
        adapter = scripted_adapter(explode, text_response("nothing"))

        graph = await DependencyGraphBuilder(ConversationLoop(adapter), "sys").build(chunks)

        assert graph.dependencies == {"a": [], "b": []}
        second = json.loads(adapter.calls[1]["transcript"][0].content)
        assert second["existingNodes"] == []

    @pytest.mark.asyncio
    async def test_forward_reference_filtered(self, scripted_adapter):
        """Test forward reference filtered"""
        chunks = [chunk("a"), chunk("b")]
        adapter = scripted_adapter(
            report("a", ["b"]),
            text_response("ok"),
            report("b", ["a"]),
            text_response("ok"),
        )

        graph = await DependencyGraphBuilder(ConversationLoop(adapter), "sys").build(chunks)

        assert graph.dependencies == {"a": [], "b": ["a"]}
        result = json.loads(adapter.calls[1]["transcript"][2].blocks()[0].content)
        assert result["ignored"] == ["b"]
