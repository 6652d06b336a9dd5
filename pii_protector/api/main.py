"""FastAPI application factory.

Assembles CORS and all API routers.
This module is the authoritative app object -- pii_protector/main.py re-exports it.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pii_protector.api.routes.categories import router as categories_router
from pii_protector.api.routes.health import router as health_router
from pii_protector.api.routes.scan import router as scan_router
from pii_protector.core.logging import setup_logging
from pii_protector.core.settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    logger.info("PII Protector API starting")
    yield


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(categories_router)
app.include_router(scan_router)
