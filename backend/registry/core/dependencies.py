from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from fastapi import Depends, HTTPException, Request, status

from registry.core.config import settings
from registry.models.auth import Session
from registry.services.access_guard import AccessGuard, GuardState
from registry.services.session_store import SessionStore
from registry.services.worker_list import WorkerListView
from registry.services.worker_repository import WorkerRepository

logger = logging.getLogger(__name__)


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_worker_repository(request: Request) -> WorkerRepository:
    return request.app.state.worker_repository


def get_worker_list_view(request: Request) -> WorkerListView:
    return request.app.state.worker_list_view


async def require_session(
    store: SessionStore = Depends(get_session_store),  # noqa: B008
) -> AsyncIterator[Session]:
    """Guard a route: wait while checking, redirect to the auth page when logged out.

    The guard stays mounted for the whole request and is released on every exit path.
    """
    with AccessGuard(store, settings.AUTH_PATH) as guard:
        outcome = guard.outcome()
        if outcome.state is GuardState.CHECKING:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=outcome.loading_text,
                headers={"Retry-After": "1"},
            )
        if outcome.state is GuardState.UNAUTHENTICATED:
            logger.debug("Redirecting unauthenticated request to %s", outcome.redirect_to)
            raise HTTPException(
                status_code=status.HTTP_303_SEE_OTHER,
                detail="Not authenticated",
                headers={"Location": outcome.redirect_to},
            )
        yield store.session
