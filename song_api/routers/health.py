"""
Health router module.

Provides GET /health for liveness probes and basic observability.
"""

import psutil
from fastapi import APIRouter, Depends

from song_api.context import ServiceContext
from song_api.dependencies import get_context
from song_api.models import HealthResponse, MemoryUsage


router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health(context: ServiceContext = Depends(get_context)) -> HealthResponse:
    """
    Report process health.

    status is "degraded" while YouTube bot checks have been recorded since
    the last successful credential refresh, "ok" otherwise.
    """
    memory = psutil.Process().memory_info()
    auth_failures = context.auth_failures
    last_refresh = context.last_credential_refresh

    return HealthResponse(
        status="degraded" if auth_failures else "ok",
        uptime=round(context.uptime(), 3),
        memory_usage=MemoryUsage(rss=memory.rss, vms=memory.vms),
        auth_failures=auth_failures,
        last_cookie_refresh=last_refresh.isoformat() if last_refresh else None,
        environment=context.settings.environment,
        cache=context.cache.stats(),
        rate_limited_clients=context.rate_limiter.tracked_clients(),
    )
