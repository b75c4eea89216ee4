from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List

from unidiff import PatchSet
from unidiff.errors import UnidiffParseError

from revieworder.domain.schemas.diff import DiffChunk
from revieworder.exceptions.errors import DiffParseError, DiffReadError

BINARY_PATCH = "Binary files differ"

_PREFIX = {"add": "+", "del": "-", "normal": " "}
_LINE_KIND = {"+": "add", "-": "del", " ": "normal"}


@dataclass(frozen=True)
class HunkLine:
    kind: str  # "add" | "del" | "normal"
    text: str


@dataclass
class Hunk:
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: List[HunkLine] = field(default_factory=list)

    @property
    def header(self) -> str:
        return f"@@ -{self.old_start},{self.old_lines} +{self.new_start},{self.new_lines} @@"


@dataclass
class FileDiff:
    path: str
    old_path: str | None = None
    new_path: str | None = None
    is_binary: bool = False
    hunks: List[Hunk] = field(default_factory=list)


def parse_unified_diff(diff_text: str) -> List[FileDiff]:
    """
    Parse unified diff text into per-file hunks.
    Empty input -> []. Input with content but no file sections is an error.
    """
    text = diff_text or ""
    if not text.strip():
        return []

    try:
        patch = PatchSet(text)
    except UnidiffParseError as e:
        raise DiffParseError(f"Unparsable diff: {e}") from e

    if len(patch) == 0:
        raise DiffParseError("Unparsable diff: no file sections found")

    files: List[FileDiff] = []
    for pf in patch:
        fd = FileDiff(
            path=pf.path,
            old_path=_strip_prefix(pf.source_file),
            new_path=_strip_prefix(pf.target_file),
            is_binary=bool(pf.is_binary_file),
        )
        for h in pf:
            hunk = Hunk(
                old_start=h.source_start,
                old_lines=h.source_length,
                new_start=h.target_start,
                new_lines=h.target_length,
            )
            for line in h:
                kind = _LINE_KIND.get(line.line_type)
                if kind is None:
                    # "\ No newline at end of file" and friends
                    continue
                hunk.lines.append(HunkLine(kind=kind, text=line.value.rstrip("\n")))
            fd.hunks.append(hunk)
        files.append(fd)
    return files


def _strip_prefix(p: str | None) -> str | None:
    if not p or p == "/dev/null":
        return None
    if p.startswith(("a/", "b/")):
        return p[2:]
    return p


def _trim_blank_edges(lines: List[str]) -> List[str]:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def _unique_id(base: str, used: Dict[str, int]) -> str:
    n = used.get(base, 0) + 1
    used[base] = n
    return base if n == 1 else f"{base}-{n}"


def merge_diff_chunks(files: Iterable[FileDiff]) -> List[DiffChunk]:
    """
    One DiffChunk per distinct file, hunks concatenated in diff order.

    content: unchanged + added lines (the post-change view)
    patch:   hunk headers followed by +/-/space prefixed lines
    """
    grouped: Dict[str, List[FileDiff]] = {}
    for fd in files:
        grouped.setdefault(fd.path, []).append(fd)

    used: Dict[str, int] = {}
    chunks: List[DiffChunk] = []
    for path, parts in grouped.items():
        is_binary = any(p.is_binary for p in parts)
        hunks = [h for p in parts for h in p.hunks]

        content_lines: List[str] = []
        patch_lines: List[str] = []
        for h in hunks:
            patch_lines.append(h.header)
            for line in h.lines:
                patch_lines.append(f"{_PREFIX[line.kind]}{line.text}")
                if line.kind != "del":
                    content_lines.append(line.text)

        patch = "\n".join(patch_lines)
        if is_binary and not hunks:
            patch = BINARY_PATCH

        chunks.append(
            DiffChunk(
                id=_unique_id(path, used),
                filename=path,
                content="\n".join(_trim_blank_edges(content_lines)),
                patch=patch,
                is_binary=is_binary,
            )
        )
    return chunks


def extract_chunks(diff_text: str) -> List[DiffChunk]:
    return merge_diff_chunks(parse_unified_diff(diff_text))


def read_diff_text(path: str | Path) -> str:
    p = Path(path)
    try:
        return p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DiffReadError(p, str(e)) from e


def read_diff_file(path: str | Path) -> List[DiffChunk]:
    return extract_chunks(read_diff_text(path))


def split_diff_by_lines(diff_text: str, max_lines: int = 100) -> List[str]:
    """
    Per-file diff text split at hunk boundaries so that no piece grows past
    max_lines changed lines (a single oversized hunk stays whole).
    """
    pieces: List[str] = []
    for fd in parse_unified_diff(diff_text):
        header = f"diff --git a/{fd.old_path or fd.path} b/{fd.new_path or fd.path}\n"
        if fd.is_binary:
            pieces.append(header + BINARY_PATCH + "\n")
            continue
        header += f"--- a/{fd.old_path or fd.path}\n+++ b/{fd.new_path or fd.path}\n"

        body, count = "", 0
        for h in fd.hunks:
            if body and count + len(h.lines) > max_lines:
                pieces.append(header + body)
                body, count = "", 0
            body += h.header + "\n"
            body += "".join(f"{_PREFIX[l.kind]}{l.text}\n" for l in h.lines)
            count += len(h.lines)
        if body:
            pieces.append(header + body)
    return pieces
