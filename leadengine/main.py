"""ASGI application entrypoint."""

from __future__ import annotations

from fastapi import FastAPI

from leadengine.api.v1.router import get_api_router
from leadengine.core.config import get_config
from leadengine.core.logging_config import configure_logging


def create_app() -> FastAPI:
    cfg = get_config()
    configure_logging()
    app = FastAPI(title=cfg.APP_NAME, version=cfg.APP_VERSION)
    app.include_router(get_api_router())

    @app.get("/")
    def root() -> dict:
        return {"service": cfg.APP_NAME, "version": cfg.APP_VERSION, "api_prefix": cfg.API_PREFIX}

    return app


# Expose ASGI app for `uvicorn leadengine.main:app`.
app = create_app()
