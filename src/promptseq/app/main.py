from __future__ import annotations

import structlog
from fastapi import FastAPI

from promptseq.api import router as api_router
from promptseq.core.config.settings import settings
from promptseq.core.logging.setup import configure_logging

log = structlog.get_logger()


def create_app() -> FastAPI:
    """
    Application factory.

    The single place where logging and the FastAPI app are set up.
    """
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    app = FastAPI(
        title="promptseq",
        version="0.1.0",
    )

    @app.on_event("startup")
    async def on_startup() -> None:
        log.info(
            "app.startup",
            environment=settings.env,
        )

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        log.info("app.shutdown")

    app.include_router(api_router, prefix="/api")

    return app


# ASGI entrypoint
app = create_app()
