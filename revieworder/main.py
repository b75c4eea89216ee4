from typing import Optional

from fastapi import FastAPI

from revieworder import __version__
from revieworder.api.routes import router
from revieworder.exceptions.handlers import register_exception_handlers
from revieworder.middleware.request_context import RequestContextMiddleware
from revieworder.services.ordering_service import OrderingService, default_conversation_logger
from revieworder.shared.logging import setup_logging


def create_app(service: Optional[OrderingService] = None) -> FastAPI:
    setup_logging()

    app = FastAPI(title="ReviewOrder", version=__version__)
    # one service per app; its adapter is created on first use
    app.state.service = service or OrderingService(conversation_logger=default_conversation_logger())
    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)
    app.include_router(router)
    return app


app = create_app()
