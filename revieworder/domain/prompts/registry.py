from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from revieworder.exceptions.errors import ReviewOrderError


@dataclass(frozen=True)
class PromptPack:
    id: str
    description: str
    tagging_system: str
    dependency_system: str
    reorder_system: str
    params: dict[str, Any]


class PromptPackNotFound(ReviewOrderError):
    pass


class PromptPackRegistry:
    """
    packs_dir/
      default/
        manifest.yaml (or json)
        tagging.system.txt
        dependencies.system.txt
        reorder.system.txt
    """

    def __init__(self, packs_dir: Path, default_pack: str = "default"):
        self.packs_dir = Path(packs_dir)
        self.default_pack = default_pack

    def get(self, pack_id: str | None = None) -> PromptPack:
        pid = (pack_id or "").strip() or self.default_pack
        return self._load_pack_cached(str(self.packs_dir), pid)

    @staticmethod
    @lru_cache(maxsize=16)
    def _load_pack_cached(packs_dir_str: str, pid: str) -> PromptPack:
        pack_dir = Path(packs_dir_str) / pid
        if not pack_dir.is_dir():
            raise PromptPackNotFound(f"Prompt pack not found: {pack_dir}")

        manifest = _load_manifest(pack_dir)
        templates = manifest.get("templates", {})

        def read_template(key: str, fallback_filename: str) -> str:
            filename = templates.get(key, fallback_filename)
            return (pack_dir / filename).read_text(encoding="utf-8").strip()

        return PromptPack(
            id=str(manifest.get("id", pid)),
            description=str(manifest.get("description", "")),
            tagging_system=read_template("tagging_system", "tagging.system.txt"),
            dependency_system=read_template("dependency_system", "dependencies.system.txt"),
            reorder_system=read_template("reorder_system", "reorder.system.txt"),
            params=dict(manifest.get("params", {})),
        )


def _load_manifest(pack_dir: Path) -> dict[str, Any]:
    """
    manifest.yaml / manifest.yml first, then manifest.json.
    A pack without a manifest uses the default file names.
    """
    for name in ("manifest.yaml", "manifest.yml"):
        path = pack_dir / name
        if path.exists():
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise RuntimeError(f"Invalid manifest format: {path}")
            return data

    json_path = pack_dir / "manifest.json"
    if json_path.exists():
        data = json.loads(json_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise RuntimeError(f"Invalid manifest format: {json_path}")
        return data

    return {"id": pack_dir.name, "description": "", "templates": {}, "params": {}}
