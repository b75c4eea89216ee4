"""
Wire types exchanged with the reasoning engine.

The conversation loop works on these provider-neutral blocks; adapters
translate them to and from langchain_core messages.
"""

from __future__ import annotations

import json
import uuid
from typing import Annotated, Any, Dict, List, Literal, Sequence, Union

from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)
from pydantic import BaseModel, ConfigDict, Field


class TextBlock(BaseModel):
    model_config = ConfigDict(extra="forbid")
    type: Literal["text"] = "text"
    text: str


class ToolUseBlock(BaseModel):
    model_config = ConfigDict(extra="forbid")
    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: Dict[str, Any] = Field(default_factory=dict)


class ToolResultBlock(BaseModel):
    model_config = ConfigDict(extra="forbid")
    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: str
    is_error: bool = False


ContentBlock = Annotated[
    Union[TextBlock, ToolUseBlock, ToolResultBlock],
    Field(discriminator="type"),
]


class Message(BaseModel):
    model_config = ConfigDict(extra="forbid")
    role: Literal["user", "assistant"]
    content: Union[str, List[ContentBlock]]

    def blocks(self) -> List[Union[TextBlock, ToolUseBlock, ToolResultBlock]]:
        if isinstance(self.content, str):
            return [TextBlock(text=self.content)]
        return list(self.content)


class EngineResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")
    content: List[ContentBlock] = Field(default_factory=list)

    def tool_uses(self) -> List[ToolUseBlock]:
        return [b for b in self.content if isinstance(b, ToolUseBlock)]

    def first_text(self) -> str | None:
        for b in self.content:
            if isinstance(b, TextBlock):
                return b.text
        return None


class ToolSpec(BaseModel):
    """Portable description of a callable tool."""
    model_config = ConfigDict(extra="forbid")
    name: str
    description: str
    input_schema: Dict[str, Any]

    def to_openai_tool(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema,
            },
        }


def to_langchain_messages(system: str, transcript: Sequence[Message]) -> List[BaseMessage]:
    out: List[BaseMessage] = [SystemMessage(content=system)]
    for msg in transcript:
        if msg.role == "assistant":
            texts = [b.text for b in msg.blocks() if isinstance(b, TextBlock)]
            calls = [
                {"name": b.name, "args": b.input, "id": b.id, "type": "tool_call"}
                for b in msg.blocks()
                if isinstance(b, ToolUseBlock)
            ]
            out.append(AIMessage(content="\n".join(texts), tool_calls=calls))
            continue

        # user turn: plain text and/or tool results
        texts = []
        for b in msg.blocks():
            if isinstance(b, ToolResultBlock):
                out.append(
                    ToolMessage(
                        content=b.content,
                        tool_call_id=b.tool_use_id,
                        status="error" if b.is_error else "success",
                    )
                )
            elif isinstance(b, TextBlock):
                texts.append(b.text)
        if texts:
            out.append(HumanMessage(content="\n".join(texts)))
    return out


def from_langchain_response(res: BaseMessage) -> EngineResponse:
    blocks: List[Union[TextBlock, ToolUseBlock]] = []

    content = res.content
    if isinstance(content, str):
        if content.strip():
            blocks.append(TextBlock(text=content))
    else:
        for part in content or []:
            if isinstance(part, str) and part.strip():
                blocks.append(TextBlock(text=part))
            elif isinstance(part, dict) and part.get("type") == "text" and part.get("text"):
                blocks.append(TextBlock(text=part["text"]))

    for call in getattr(res, "tool_calls", None) or []:
        args = call.get("args") or {}
        if isinstance(args, str):
            # some local servers hand back the raw JSON string
            try:
                args = json.loads(args)
            except json.JSONDecodeError:
                args = {"__raw__": args}
        blocks.append(
            ToolUseBlock(
                id=call.get("id") or f"call_{uuid.uuid4().hex[:12]}",
                name=call["name"],
                input=args,
            )
        )
    return EngineResponse(content=blocks)
