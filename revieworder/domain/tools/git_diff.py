from __future__ import annotations

import os
import subprocess
from typing import List, Optional, Tuple

from revieworder.exceptions.errors import ReviewOrderError


class GitError(ReviewOrderError):
    pass


def _run_git(args: List[str], cwd: Optional[str] = None, timeout: int = 20) -> Tuple[int, str, str]:
    """
    Returns (returncode, stdout, stderr)
    """
    try:
        proc = subprocess.run(
            ["git", *args],
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            shell=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise GitError(f"git {' '.join(args)} could not run: {e}") from e
    return proc.returncode, proc.stdout, proc.stderr


def _find_repo_root(start: Optional[str] = None) -> str:
    cwd = start or os.getcwd()
    code, out, err = _run_git(["rev-parse", "--show-toplevel"], cwd=cwd)
    if code != 0:
        raise GitError(f"Not a git repository (cwd={cwd}). git error: {err.strip()}")
    return out.strip()


def build_diff_args(diff_target: str, context_lines: int = 3) -> List[str]:
    """
    diff_target:
      - "staged" (default): git diff --staged
      - "worktree": git diff
      - "<commit-ish>..<commit-ish>" / "<commit-ish>...<commit-ish>": range compare
    Anything else is rejected instead of being passed through to git.
    """
    base_args = ["diff", f"--unified={context_lines}"]
    target = (diff_target or "staged").strip()
    if target == "staged":
        return [*base_args, "--staged"]
    if target == "worktree":
        return base_args
    if ".." in target and not target.startswith("-"):
        return [*base_args, target]
    raise GitError(f"Unsupported diff target: {diff_target!r}")


def get_git_diff(
    *,
    diff_target: str = "staged",
    repo_path: Optional[str] = None,
    context_lines: int = 3,
    max_chars: int = 1_500_000,
) -> str:
    root = repo_path or _find_repo_root(None)

    code, out, err = _run_git(build_diff_args(diff_target, context_lines), cwd=root)
    if code != 0:
        raise GitError(f"git diff failed: {err.strip()}")

    out = out or ""
    if len(out) > max_chars:
        # cut at the last file boundary so no hunk is left half-parsed
        cut = out.rfind("\ndiff --git ", 0, max_chars)
        out = out[: cut + 1] if cut > 0 else ""
        if not out:
            raise GitError(f"Diff exceeds {max_chars} characters and cannot be truncated safely")
    return out
