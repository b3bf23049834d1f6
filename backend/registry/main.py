from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from registry.api.v1.router import api_router
from registry.core.config import settings
from registry.core.logging_config import configure_logging
from registry.core.supabase import create_supabase_client
from registry.services.auth_provider import SupabaseAuthProvider
from registry.services.session_store import SessionStore
from registry.services.worker_list import WorkerListView
from registry.services.worker_repository import WorkerRepository

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    configure_logging(settings)

    client = None
    try:
        client = await create_supabase_client(settings)
    except Exception:
        logger.exception("Failed to create Supabase client — continuing without backend")

    session_store = SessionStore(SupabaseAuthProvider(client) if client else None)
    worker_repository = WorkerRepository()
    try:
        await worker_repository.initialize(client, settings)
    except Exception:
        logger.exception("Failed to initialize WorkerRepository — continuing without DB")
    try:
        await session_store.initialize()
    except Exception:
        logger.exception("Failed to initialize SessionStore — continuing logged out")

    worker_list_view = WorkerListView(
        worker_repository,
        session_store,
        notification_ttl=settings.NOTIFICATION_TTL_SECONDS,
    )
    worker_list_view.mount()

    application.state.session_store = session_store
    application.state.worker_repository = worker_repository
    application.state.worker_list_view = worker_list_view
    try:
        yield
    finally:
        worker_list_view.unmount()
        await session_store.close()
        await worker_repository.close()


app = FastAPI(
    title="Worker Registry API",
    description="Gestion des travailleurs",
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
    return RedirectResponse(settings.AUTH_PATH)
