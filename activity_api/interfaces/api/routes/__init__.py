from fastapi import FastAPI

from .activity import router as activity_router
from .admin_activity import router as admin_activity_router
from .health import router as health_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(health_router)
    app.include_router(activity_router)
    app.include_router(admin_activity_router)
