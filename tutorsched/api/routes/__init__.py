from fastapi import FastAPI

from . import admin, announcements, auth, health, notifications, slots


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the FastAPI application."""
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(slots.router)
    app.include_router(announcements.router)
    app.include_router(notifications.router)
    app.include_router(admin.router)
