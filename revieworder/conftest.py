"""
Shared fixtures: a scripted stand-in for the reasoning engine.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import pytest

from revieworder.llm.base import LLMAdapter
from revieworder.llm.messages import EngineResponse, Message, TextBlock, ToolSpec, ToolUseBlock


Script = Union[EngineResponse, Callable[[Sequence[Message], Sequence[ToolSpec]], EngineResponse]]


def text_response(text: str) -> EngineResponse:
    return EngineResponse(content=[TextBlock(text=text)])


def tool_response(name: str, args: Dict[str, Any], call_id: str = "call_1") -> EngineResponse:
    return EngineResponse(content=[ToolUseBlock(id=call_id, name=name, input=args)])


class ScriptedAdapter(LLMAdapter):
    """
    Replays queued responses in order. A queued callable is called with
    (transcript, tools) so a reply can depend on what the loop sent.
    When the script runs out, `fallback` (same signature) answers, or plain
    text when there is none.
    """

    def __init__(self, script: List[Script], fallback: Optional[Callable] = None):
        self.script = list(script)
        self.fallback = fallback
        self.calls: List[Dict[str, Any]] = []

    @property
    def provider(self) -> str:
        return "scripted"

    @property
    def model_name(self) -> str:
        return "scripted"

    def get_chat_model(self):
        raise NotImplementedError("scripted adapter has no chat model")

    async def acomplete(self, *, system, transcript, tools) -> EngineResponse:
        self.calls.append(
            {
                "system": system,
                "transcript": list(transcript),
                "tools": [t.name for t in tools],
            }
        )
        if self.script:
            step = self.script.pop(0)
        elif self.fallback is not None:
            step = self.fallback
        else:
            return text_response("ok")
        if callable(step):
            return step(transcript, tools)
        return step


@pytest.fixture
def scripted_adapter():
    def make(*script: Script, fallback: Optional[Callable] = None) -> ScriptedAdapter:
        return ScriptedAdapter(list(script), fallback=fallback)

    return make


SAMPLE_DIFF = """\
diff --git a/src/interfaces.ts b/src/interfaces.ts
index 1111111..2222222 100644
--- a/src/interfaces.ts
+++ b/src/interfaces.ts
@@ -1,3 +1,4 @@
 export interface User {
   id: string;
+  email: string;
 }
@@ -10,2 +11,3 @@
 export type Id = string;
+export type Email = string;
 // end
diff --git a/src/userService.ts b/src/userService.ts
index 3333333..4444444 100644
--- a/src/userService.ts
+++ b/src/userService.ts
@@ -1,2 +1,3 @@
 import { User } from "./interfaces";
-export const load = () => null;
+export const load = (): User | null => null;
+export const save = (u: User) => u;
"""


@pytest.fixture
def sample_diff() -> str:
    return SAMPLE_DIFF
