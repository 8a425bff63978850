# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Studio API application factory.

``create_app`` wires the routers, the auth and CORS middleware, the slowapi
limiter and the enrollment rate limiter. The lifespan opens the database,
connects Redis when submissions are throttled there, and creates the
bootstrap admin.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from gymstudio import __version__
from gymstudio.api.dependencies import close_db, init_db
from gymstudio.api.middleware.auth import AuthMiddleware
from gymstudio.api.middleware.rate_limit import (
    build_rate_limiter,
    limiter,
    rate_limit_exceeded_handler,
)
from gymstudio.api.routes import health
from gymstudio.api.v1 import router as v1_router
from gymstudio.core.config import get_settings
from gymstudio.domains.auth.jwt import JWTManager
from gymstudio.domains.auth.password import PasswordHasher
from gymstudio.domains.auth.service import AuthService
from gymstudio.domains.errors import StoreError
from gymstudio.infrastructure.cache import close_redis, init_redis
from gymstudio.infrastructure.database.connection import DatabaseError, get_session
from gymstudio.utils.logging import setup_logging

logger = logging.getLogger(__name__)


async def _bootstrap_admin() -> None:
    """Create the configured admin account if it does not exist yet."""
    settings = get_settings()
    security = settings.security
    if not security.admin_email or security.admin_password is None:
        return

    async with get_session() as session:
        auth_service = AuthService(
            session,
            JWTManager(settings.jwt),
            PasswordHasher(rounds=security.bcrypt_rounds),
        )
        await auth_service.ensure_admin(
            security.admin_email,
            security.admin_password.get_secret_value(),
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open shared resources on startup and release them on shutdown."""
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Starting studio API",
        extra={"environment": settings.environment, "debug": settings.debug},
    )

    # Startup
    await init_db()
    logger.info("Database connections initialized")

    if settings.rate_limit.backend == "redis":
        app.state.redis = await init_redis(settings)
        app.state.enrollment_rate_limiter = build_rate_limiter(settings, app.state.redis)
        logger.info("Redis connection initialized")

    try:
        await _bootstrap_admin()
    except (StoreError, DatabaseError) as e:
        logger.warning("Failed to create bootstrap admin: %s", str(e))

    yield

    # Shutdown
    if getattr(app.state, "redis", None) is not None:
        await close_redis()
        app.state.redis = None
        logger.info("Redis connection closed")

    await close_db()
    logger.info("Shutting down studio API")


async def store_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Answer 503 when the data store fails."""
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Service temporarily unavailable"},
    )


def create_app() -> FastAPI:
    """Build the studio API. API docs are served only in debug mode."""
    settings = get_settings()

    app = FastAPI(
        title="Gymnastics Studio API",
        description="Enrollment intake, review and class assignment",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        # 307 slash redirects drop the Authorization header
        redirect_slashes=False,
    )

    # State
    app.state.limiter = limiter
    app.state.redis = None
    if settings.rate_limit.backend == "memory":
        app.state.enrollment_rate_limiter = build_rate_limiter(settings)

    # Exception handlers
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(DatabaseError, store_error_handler)

    # Last added runs first: CORS wraps auth
    app.add_middleware(AuthMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    # Routes
    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app
