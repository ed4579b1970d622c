from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from spincity.core.config import Settings, get_settings
from spincity.core.log import configure_logging
from spincity.routers import auth as auth_router
from spincity.routers import backup as backup_router
from spincity.routers import hooks as hooks_router
from spincity.routers import maintenance as maintenance_router
from spincity.routers import records as records_router
from spincity.routers import reports as reports_router
from spincity.routers import settings as settings_router
from spincity.services.container import ServiceContainer, build_container

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers for a JSON API."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Cache-Control", "no-store")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: ServiceContainer = app.state.container
    state = await container.session.bootstrap()
    logger.info("Session bootstrap finished: %s", state.value)
    try:
        yield
    finally:
        container.session.close()


def create_app(settings: Optional[Settings] = None, container: Optional[ServiceContainer] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    container = container or build_container(settings)

    app = FastAPI(title="SpinCity Backend", lifespan=lifespan)
    app.state.container = container

    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(auth_router.router)
    app.include_router(records_router.router)
    app.include_router(settings_router.router)
    app.include_router(backup_router.router)
    app.include_router(maintenance_router.router)
    app.include_router(reports_router.router)
    app.include_router(hooks_router.router)
    return app
