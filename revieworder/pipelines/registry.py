from __future__ import annotations
import importlib
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from revieworder.exceptions.errors import StrategyNotFound


@dataclass(frozen=True)
class PipelineSpec:
    id: str
    pipeline: str           # "module.path:ClassName"
    params: Dict[str, Any]


class PipelineRegistry:
    def __init__(self, presets_dir: str | Path):
        self.presets_dir = Path(presets_dir)

    def available(self) -> list[str]:
        return sorted(p.stem for p in self.presets_dir.glob("*.yaml"))

    def load_spec(self, strategy: str) -> PipelineSpec:
        path = self.presets_dir / f"{strategy.lower()}.yaml"
        if not path.exists():
            raise StrategyNotFound(
                f"Unknown strategy {strategy!r}; available: {', '.join(self.available())}"
            )
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        return PipelineSpec(id=data["id"], pipeline=data["pipeline"], params=data.get("params") or {})

    def build_pipeline(self, spec: PipelineSpec, pack, **kwargs):
        mod_path, cls_name = spec.pipeline.split(":")
        mod = importlib.import_module(mod_path)
        cls = getattr(mod, cls_name)
        return cls(pack=pack, params=spec.params, **kwargs)
