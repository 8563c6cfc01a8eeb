"""
FastAPI application entry point for the Lightberry backend.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from lightberry.config import get_settings
from lightberry.routes import admin_router, router


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    app = FastAPI(title="Lightberry Experimental Lab API", version="0.1.0")
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(
        admin_router, prefix=f"{settings.api_prefix}/admin", tags=["admin"]
    )
    return app


app = create_app()
