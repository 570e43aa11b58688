"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import api_router
from app.config import get_settings
from app.core.logging import setup_logging
from app.core.telemetry import setup_telemetry
from app.db.init import init_database
from app.db.session import get_engine

logger = logging.getLogger(__name__)

settings = get_settings()
app = FastAPI(title=settings.app_name, version="0.1.0")
setup_logging()
setup_telemetry(app, settings, engine=get_engine)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
    expose_headers=["traceparent", "tracestate", "x-request-id"],
)


@app.on_event("startup")
async def startup() -> None:
    """Initialise the database schema when the service boots."""

    logger.info("Starting %s with %s", settings.app_name, settings.dict_for_logging())
    await init_database()


@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    """Return service readiness metadata."""

    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "base_currency": settings.base_currency.value,
    }


def configure_app() -> FastAPI:
    """Attach routes."""

    app.include_router(api_router, prefix=settings.api_prefix)
    return app


configure_app()

__all__ = ["app", "configure_app"]
