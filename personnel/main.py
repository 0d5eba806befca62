from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from personnel.api.v1.router import api_router
from personnel.core.config import settings
from personnel.services.personnel_repository import personnel_repository
from personnel.services.session_registry import SessionRegistry
from personnel.services.state_store import JsonFileStore

logger = logging.getLogger(__name__)

if settings.DEBUG:
    logging.getLogger().setLevel(logging.DEBUG)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    try:
        await personnel_repository.initialize(settings)
    except Exception:
        logger.exception("Failed to initialize PersonnelRepository — continuing without remote API")

    application.state.sessions = SessionRegistry(
        JsonFileStore(settings.OVERVIEW_STATE_FILE),
        debounce_ms=settings.FILTER_DEBOUNCE_MS,
    )
    yield
    application.state.sessions.close()
    await personnel_repository.close()


app = FastAPI(
    title="Personnel Admin API",
    description="Employee overview and qualification catalog",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "Personnel Admin API"}
