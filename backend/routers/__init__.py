"""API router initializers."""

from fastapi import APIRouter


def get_api_router() -> APIRouter:
    """Construct and return the API router."""

    from backend.routers.health import router as health_router

    api_router = APIRouter()
    api_router.include_router(health_router, tags=["health"])
    return api_router
