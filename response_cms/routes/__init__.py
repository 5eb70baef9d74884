"""APIRouter registration for the Response CMS."""

from __future__ import annotations

from fastapi import APIRouter

from response_cms.routes.auth import router as auth_router
from response_cms.routes.delivery import router as delivery_router
from response_cms.routes.health import router as health_router
from response_cms.routes.management import router as management_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["Health"])
api_router.include_router(auth_router, tags=["Auth"])
api_router.include_router(management_router, tags=["Management"])
api_router.include_router(delivery_router, tags=["Delivery"])

__all__ = ["api_router"]
