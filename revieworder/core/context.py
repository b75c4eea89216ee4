from __future__ import annotations

import re
import uuid
from contextvars import ContextVar
from typing import Optional

# correlates log lines, conversation logs and API responses of one run
run_id_var: ContextVar[str] = ContextVar("run_id", default="unknown")

_RUN_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def new_run_id(requested: Optional[str] = None) -> str:
    """Caller-supplied id when it is safe to put in a file name, else a fresh one."""
    if requested and _RUN_ID.match(requested):
        return requested
    return uuid.uuid4().hex
