"""
FastAPI application entry point for the Blogify backend.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from pymongo.errors import PyMongoError

from blogify.config import Settings, get_settings
from blogify.dependencies import store_for
from blogify.routes import router, session_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A failed ping is only logged; the listener keeps serving.
    try:
        store_for(app).ping()
        logger.info("Connected to the document store")
    except (PyMongoError, ValueError):
        logger.exception("Document store ping failed at startup")
    yield


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Blogify Backend (FastAPI)", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.include_router(router)
    if settings.auth_mode == "cookie":
        app.include_router(session_router)
    return app


app = create_app()
