from fastapi import APIRouter

from registry.api.v1.endpoints import auth, health, home, workers

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(home.router)
api_router.include_router(workers.router)
