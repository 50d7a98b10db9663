"""
HTTP API for the Baton Event Service.
"""
from fastapi import APIRouter

from .routes.events import router as events_router
from .routes.health import router as health_router

router = APIRouter()
router.include_router(health_router)
router.include_router(events_router)

__all__ = ["router"]
