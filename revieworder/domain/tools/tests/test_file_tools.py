"""
Tests for file_tools.py and git_diff.py
"""
import json
from pathlib import Path

import pytest

from revieworder.domain.tools.file_tools import FILE_TOOLS
from revieworder.domain.tools.git_diff import GitError, build_diff_args
from revieworder.domain.tools.registry import ToolRegistry


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry(list(FILE_TOOLS))


@pytest.mark.asyncio
async def test_read_file(registry: ToolRegistry, tmp_path: Path):
    """Test read file"""
    target = tmp_path / "notes.txt"
    target.write_text("hello")

    result = await registry.invoke("read_file", {"path": str(target)})

    assert json.loads(result.content) == {"content": "hello"}


@pytest.mark.asyncio
async def test_read_missing_file_is_error_result(registry: ToolRegistry, tmp_path: Path):
    """Test read missing file is error result"""
    result = await registry.invoke("read_file", {"path": str(tmp_path / "nope.txt")})

    assert result.is_error
    assert "Failed to read file" in json.loads(result.content)["error"]


@pytest.mark.asyncio
async def test_list_files_sorted(registry: ToolRegistry, tmp_path: Path):
    """Test list files sorted"""
    (tmp_path / "b.py").write_text("")
    (tmp_path / "a.py").write_text("")

    result = await registry.invoke("list_files", {"directory": str(tmp_path)})

    assert json.loads(result.content) == {"files": ["a.py", "b.py"]}


@pytest.mark.asyncio
async def test_read_diff_file(registry: ToolRegistry, tmp_path: Path, sample_diff: str):
    """Test read diff file"""
    path = tmp_path / "change.diff"
    path.write_text(sample_diff)

    result = await registry.invoke("read_diff_file", {"path": str(path)})
    data = json.loads(result.content)

    assert data["totalChunks"] == 2
    assert [c["id"] for c in data["chunks"]] == ["src/interfaces.ts", "src/userService.ts"]


@pytest.mark.asyncio
async def test_parse_diff_respects_line_budget(registry: ToolRegistry, sample_diff: str):
    """Test parse diff respects line budget"""
    result = await registry.invoke("parse_diff", {"diff": sample_diff, "max_lines_per_chunk": 4})
    data = json.loads(result.content)

    # interfaces.ts has two hunks of 4 and 3 lines, so it splits in two
    assert data["totalChunks"] == 3
    assert all(piece.startswith("diff --git ") for piece in data["chunks"])


class TestBuildDiffArgs:
    """Test build diff args"""

    def test_staged(self):
        """Test the staged target"""
        assert build_diff_args("staged", 5) == ["diff", "--unified=5", "--staged"]

    def test_worktree(self):
        """Test the worktree target"""
        assert build_diff_args("worktree") == ["diff", "--unified=3"]

    def test_range(self):
        """Test a commit range target"""
        assert build_diff_args("main..feature")[-1] == "main..feature"

    def test_empty_defaults_to_staged(self):
        """Test that an empty target means staged"""
        assert build_diff_args("")[-1] == "--staged"

    @pytest.mark.parametrize("target", ["HEAD", "--output=/tmp/x", "-..x"])
    def test_rejects_other_targets(self, target: str):
        """Test rejects other targets"""
        with pytest.raises(GitError):
            build_diff_args(target)
