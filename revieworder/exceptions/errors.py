from __future__ import annotations

from pathlib import Path


class ReviewOrderError(RuntimeError):
    """Base class for every error raised by revieworder."""


class DiffParseError(ReviewOrderError):
    pass


class DiffReadError(ReviewOrderError):
    def __init__(self, path: str | Path, reason: str):
        self.path = str(path)
        super().__init__(f"Failed to read diff file {self.path}: {reason}")


class OutputWriteError(ReviewOrderError):
    def __init__(self, path: str | Path, reason: str):
        self.path = str(path)
        super().__init__(f"Failed to write output {self.path}: {reason}")


class ToolError(ReviewOrderError):
    """Tool lookup or argument validation failed before execution."""

    def __init__(self, tool_name: str, message: str):
        self.tool_name = tool_name
        super().__init__(message)


class ToolNotFoundError(ToolError):
    def __init__(self, tool_name: str):
        super().__init__(tool_name, f"Tool '{tool_name}' not found")


class ToolValidationError(ToolError):
    def __init__(self, tool_name: str, violations: list[str]):
        self.violations = violations
        super().__init__(
            tool_name,
            f"Invalid arguments for tool '{tool_name}': {'; '.join(violations)}",
        )


class ChunkMetadataError(ReviewOrderError):
    pass


class EngineUnavailableError(ReviewOrderError):
    pass


class ConversationCancelledError(ReviewOrderError):
    pass


class StrategyNotFound(ReviewOrderError):
    pass
