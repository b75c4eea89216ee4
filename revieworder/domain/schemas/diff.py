from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

from revieworder.exceptions.errors import ChunkMetadataError


class Priority(str, Enum):
    high = "high"
    low = "low"
    unknown = "unknown"


_FIXED_FIELDS = frozenset({"id", "filename", "content", "patch", "is_binary"})


@dataclass
class DiffChunk:
    """
    Unit of review: every hunk of one file merged together.

    Attributes:
        id: run-unique identifier derived from the filename
        filename: path of the changed file
        content: added + unchanged lines, used for semantic analysis
        patch: literal unified diff text, used for display/export
        tags/priority: written once by the classifier

    id, filename, content, patch and is_binary are fixed once the chunk is
    built; only the classifier metadata may change afterwards.
    """
    id: str
    filename: str
    content: str
    patch: str
    is_binary: bool = False
    tags: Optional[List[str]] = None
    priority: Optional[Priority] = None

    def __setattr__(self, name: str, value: object) -> None:
        if name in _FIXED_FIELDS and name in self.__dict__:
            raise AttributeError(f"DiffChunk.{name} is read-only")
        object.__setattr__(self, name, value)

    @property
    def is_tagged(self) -> bool:
        return self.tags is not None

    def assign_metadata(self, tags: List[str], priority: Priority | str) -> None:
        if self.is_tagged:
            raise ChunkMetadataError(f"Chunk {self.id} is already tagged")
        # keep first occurrence, drop blanks
        seen: list[str] = []
        for tag in tags:
            tag = tag.strip()
            if tag and tag not in seen:
                seen.append(tag)
        self.tags = seen
        self.priority = Priority(priority)

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "filename": self.filename,
            "content": self.content,
            "patch": self.patch,
            "is_binary": self.is_binary,
            "tags": list(self.tags) if self.tags is not None else None,
            "priority": self.priority.value if self.priority else None,
        }


@dataclass
class DependencyGraph:
    nodes: List[DiffChunk]
    # chunk id -> ids it depends on; a missing key means "not analyzed yet"
    dependencies: Dict[str, List[str]] = field(default_factory=dict)

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def to_dict(self) -> Dict[str, object]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "dependencies": {k: list(v) for k, v in self.dependencies.items()},
        }


@dataclass
class OrderingState:
    chunks: List[DiffChunk]
    done: bool = False


@dataclass(frozen=True)
class Resolved:
    chunk: DiffChunk


@dataclass(frozen=True)
class Dropped:
    id: str
    reason: str


Resolution = Union[Resolved, Dropped]


def resolve_ids(ids: List[str], chunks: List[DiffChunk]) -> List[Resolution]:
    """
    Map ids reported by the LLM back onto known chunks.
    Unknown and repeated ids come back as Dropped.
    """
    by_id = {c.id: c for c in chunks}
    taken: set[str] = set()
    out: List[Resolution] = []
    for raw in ids:
        cid = str(raw).strip()
        chunk = by_id.get(cid)
        if chunk is None:
            out.append(Dropped(id=cid, reason="unknown"))
        elif cid in taken:
            out.append(Dropped(id=cid, reason="duplicate"))
        else:
            taken.add(cid)
            out.append(Resolved(chunk=chunk))
    return out
