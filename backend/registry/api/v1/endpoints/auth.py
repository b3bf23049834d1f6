from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from registry.core.config import settings
from registry.core.dependencies import get_session_store
from registry.models.auth import SessionInfo
from registry.models.views import AuthPage
from registry.services.auth_view import AuthMode, AuthView
from registry.services.session_store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class AuthRequest(BaseModel):
    mode: AuthMode = AuthMode.LOGIN
    email: str = ""
    password: str = ""


@router.get("", response_model=AuthPage)
async def auth_page(
    mode: AuthMode = AuthMode.LOGIN,
    store: SessionStore = Depends(get_session_store),  # noqa: B008
):
    return AuthView(store, mode).render()


@router.post("", response_model=AuthPage)
async def authenticate(
    body: AuthRequest,
    response: Response,
    store: SessionStore = Depends(get_session_store),  # noqa: B008
):
    view = AuthView(store, body.mode)
    view.change("email", body.email)
    view.change("password", body.password)

    session = await view.submit()
    if session is not None:
        logger.info("User %s signed in", session.user_id)
        return RedirectResponse(settings.HOME_PATH, status_code=status.HTTP_303_SEE_OTHER)

    if view.message is not None and view.message.type == "error":
        response.status_code = status.HTTP_400_BAD_REQUEST
    return view.render()


@router.post("/toggle", response_model=AuthPage)
async def toggle_mode(
    mode: AuthMode = AuthMode.LOGIN,
    store: SessionStore = Depends(get_session_store),  # noqa: B008
):
    """Switch between login and signup; the form comes back empty."""
    view = AuthView(store, mode)
    view.toggle_mode()
    return view.render()


@router.get("/session", response_model=SessionInfo)
async def current_session(store: SessionStore = Depends(get_session_store)):  # noqa: B008
    session = store.session
    return SessionInfo(
        loading=store.loading,
        is_logged_in=session is not None,
        user=session.user if session else None,
        expires_at=session.expires_at if session else None,
    )
