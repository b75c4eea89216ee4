from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from revieworder.core.context import run_id_var
from revieworder.llm.messages import Message

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


class FileConversationLogger:
    """
    Writes one JSON file per finished conversation:
      <directory>/<log_key>-<timestamp>.json
    A failed write is logged, never raised.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, log_key: Optional[str], now: datetime) -> Path:
        key = _UNSAFE.sub("_", log_key or "conversation").strip("_") or "conversation"
        return self.directory / f"{key}-{now.strftime('%Y%m%dT%H%M%S%fZ')}.json"

    async def log(
        self, transcript: Sequence[Message], system_prompt: str, log_key: Optional[str]
    ) -> None:
        now = datetime.now(timezone.utc)
        path = self.path_for(log_key, now)
        doc = {
            "log_key": log_key,
            "run_id": run_id_var.get(),
            "logged_at": now.isoformat(),
            "system_prompt": system_prompt,
            "transcript": [m.model_dump(mode="json") for m in transcript],
        }
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(doc, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error("CONVERSATION_LOG_FAILED path=%s error=%s", path, e)
