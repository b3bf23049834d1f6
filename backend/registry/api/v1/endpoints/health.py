from __future__ import annotations

from fastapi import APIRouter, Depends

from registry.core.config import settings
from registry.core.dependencies import get_session_store, get_worker_repository, require_session
from registry.models.auth import Session
from registry.services.session_store import SessionStore
from registry.services.worker_repository import WorkerRepository

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check(
    store: SessionStore = Depends(get_session_store),  # noqa: B008
    repository: WorkerRepository = Depends(get_worker_repository),  # noqa: B008
):
    services: dict[str, str] = {}

    if store.provider is None:
        services["supabase_auth"] = "not_configured"
    else:
        services["supabase_auth"] = "ok" if store.initialized else "error"

    try:
        if repository.initialized:
            ok = await repository.check_connection()
            services["supabase_db"] = "ok" if ok else "error"
        else:
            services["supabase_db"] = "not_configured"
    except Exception:
        services["supabase_db"] = "error"

    all_ok = all(v in ("ok", "not_configured") for v in services.values())

    return {
        "status": "healthy" if all_ok else "degraded",
        "version": settings.APP_VERSION,
        "services": services,
    }


@router.get("/protected")
async def health_protected(session: Session = Depends(require_session)):  # noqa: B008
    return {"status": "ok", "user": session.user.model_dump()}


@router.get("/ready")
async def readiness_probe():
    return {"ready": True}
