"""
Schema-validated tool registry.

Each tool declares a pydantic input model; the registry validates raw LLM
arguments against it before dispatching to the tool's coroutine.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError
from pydantic_core import to_jsonable_python

from revieworder.exceptions.errors import ToolNotFoundError, ToolValidationError
from revieworder.llm.messages import ToolSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    schema: Type[BaseModel]
    execute: Callable[[Any], Awaitable[Any]]

    def spec(self) -> ToolSpec:
        return ToolSpec(
            name=self.name,
            description=self.description,
            input_schema=self.schema.model_json_schema(),
        )


@dataclass(frozen=True)
class ToolResult:
    tool_name: str
    content: str
    is_error: bool = False

    @classmethod
    def error(cls, tool_name: str, message: str) -> "ToolResult":
        return cls(tool_name=tool_name, content=json.dumps({"error": message}), is_error=True)


def _format_violations(exc: ValidationError) -> List[str]:
    out: List[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        out.append(f"{loc}: {err.get('msg')} ({err.get('type')})")
    return out


def serialize_result(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=to_jsonable_python, ensure_ascii=False)


class ToolRegistry:
    def __init__(self, tools: Optional[List[Tool]] = None):
        self._tools: Dict[str, Tool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool

    def unregister(self, name: str) -> None:
        self._tools.pop(name, None)

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def fork(self) -> "ToolRegistry":
        """Independent copy for one conversation; scoped tools go here."""
        return ToolRegistry(list(self._tools.values()))

    def describe_all(self) -> List[ToolSpec]:
        return [t.spec() for t in self._tools.values()]

    async def invoke(self, name: str, raw_arguments: Any) -> ToolResult:
        """
        Raises ToolNotFoundError / ToolValidationError before execution.
        Failures inside the tool itself come back as an error ToolResult.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)

        try:
            params = tool.schema.model_validate(raw_arguments if raw_arguments is not None else {})
        except ValidationError as e:
            raise ToolValidationError(name, _format_violations(e)) from e

        try:
            value = await tool.execute(params)
        except Exception as e:
            logger.warning("TOOL_FAILED tool=%s error=%s", name, e)
            return ToolResult.error(name, str(e) or e.__class__.__name__)

        return ToolResult(tool_name=name, content=serialize_result(value))
