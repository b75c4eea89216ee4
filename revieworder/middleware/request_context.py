from __future__ import annotations

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from revieworder.core.context import new_run_id, run_id_var

logger = logging.getLogger("revieworder")

RUN_ID_HEADER = "X-Run-Id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Binds a run id to the request: the client's X-Run-Id when usable,
    otherwise a new one. Echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        run_id = new_run_id(request.headers.get(RUN_ID_HEADER))
        token = run_id_var.set(run_id)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            run_id_var.reset(token)

        response.headers[RUN_ID_HEADER] = run_id
        logger.info(
            "HTTP run_id=%s method=%s path=%s status=%s elapsed_ms=%.1f",
            run_id,
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response
