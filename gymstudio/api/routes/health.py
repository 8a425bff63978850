# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoint."""

import logging
import time
from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from gymstudio import __version__
from gymstudio.core.config import get_settings
from gymstudio.infrastructure.database.connection import check_database_connection
from gymstudio.utils.datetime import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()


class ComponentHealth(BaseModel):
    """Individual component health status."""

    status: str = Field(description="Component status")
    message: str | None = Field(None, description="Additional status message")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(description="Overall health status")
    version: str = Field(description="API version")
    environment: str = Field(description="Deployment environment")
    uptime_seconds: int = Field(description="Server uptime in seconds")
    checked_at: datetime = Field(description="When health was checked")
    components: dict[str, ComponentHealth] = Field(default_factory=dict)


async def check_database() -> ComponentHealth:
    """Check the studio database connection."""
    if await check_database_connection():
        return ComponentHealth(status="healthy")
    logger.error("Database health check failed")
    return ComponentHealth(status="unhealthy", message="Database unreachable")


async def check_redis(request: Request) -> ComponentHealth | None:
    """Check Redis when the shared rate limiter uses it."""
    redis = getattr(request.app.state, "redis", None)
    if redis is None:
        return None
    if await redis.ping():
        return ComponentHealth(status="healthy")
    logger.error("Redis health check failed")
    return ComponentHealth(status="unhealthy", message="Redis unreachable")


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Report API health with component details.

    The overall status is ``degraded`` when any component is unhealthy.
    """
    settings = get_settings()
    components = {"database": await check_database()}
    redis_health = await check_redis(request)
    if redis_health is not None:
        components["redis"] = redis_health

    healthy = all(component.status == "healthy" for component in components.values())
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=__version__,
        environment=settings.environment,
        uptime_seconds=int(time.time() - _server_start_time),
        checked_at=utc_now(),
        components=components,
    )
