from fastapi import FastAPI

from bitloot.admin.api import router as admin_router
from bitloot.auth.api import router as auth_router
from bitloot.health.api import router as health_router
from bitloot.sessions.api import router as sessions_router


def configure_routers(app: FastAPI) -> FastAPI:
    app.include_router(admin_router)
    app.include_router(auth_router)
    app.include_router(health_router)
    app.include_router(sessions_router)
    return app
