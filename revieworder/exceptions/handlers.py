from __future__ import annotations

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from revieworder.core.context import run_id_var
from revieworder.domain.tools.git_diff import GitError
from revieworder.exceptions.errors import (
    ConversationCancelledError,
    DiffParseError,
    DiffReadError,
    EngineUnavailableError,
    ReviewOrderError,
    StrategyNotFound,
)

logger = logging.getLogger("revieworder")

_STATUS = (
    (DiffParseError, 422),
    (DiffReadError, 400),
    (GitError, 400),
    (StrategyNotFound, 404),
    (ConversationCancelledError, 504),
    (EngineUnavailableError, 503),
)


def status_for(exc: ReviewOrderError) -> int:
    for cls, code in _STATUS:
        if isinstance(exc, cls):
            return code
    return 500


def register_exception_handlers(app) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        run_id = run_id_var.get()
        logger.warning(
            "VALIDATION run_id=%s path=%s errors=%s",
            run_id,
            request.url.path,
            exc.errors(),
        )
        return JSONResponse(status_code=422, content={"detail": exc.errors(), "run_id": run_id})

    @app.exception_handler(ReviewOrderError)
    async def review_order_exception_handler(request: Request, exc: ReviewOrderError):
        run_id = run_id_var.get()
        code = status_for(exc)
        log = logger.error if code >= 500 else logger.warning
        log("ERROR run_id=%s path=%s type=%s msg=%s", run_id, request.url.path, type(exc).__name__, exc)
        return JSONResponse(status_code=code, content={"detail": str(exc), "run_id": run_id})
