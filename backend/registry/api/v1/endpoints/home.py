from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import RedirectResponse

from registry.core.config import settings
from registry.core.dependencies import get_session_store, require_session
from registry.models.auth import Session
from registry.models.views import HomePage
from registry.services.home_view import HomeView
from registry.services.session_store import SessionStore

router = APIRouter(prefix="/home", tags=["home"])


@router.get("", response_model=HomePage)
async def home_page(
    session: Session = Depends(require_session),  # noqa: B008
    store: SessionStore = Depends(get_session_store),  # noqa: B008
):
    return HomeView(store, settings).render()


@router.post("/logout", response_model=HomePage)
async def logout(
    response: Response,
    session: Session = Depends(require_session),  # noqa: B008
    store: SessionStore = Depends(get_session_store),  # noqa: B008
):
    view = HomeView(store, settings)
    target = await view.logout()
    if target is not None:
        return RedirectResponse(target, status_code=status.HTTP_303_SEE_OTHER)
    response.status_code = status.HTTP_502_BAD_GATEWAY
    return view.render()
