"""
Admin router for administrative endpoints.

This module provides endpoints for:
- Triggering a credential (cookie) refresh
- Clearing the response cache
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from song_api.context import ServiceContext
from song_api.dependencies import get_context, verify_api_key
from song_api.models import CredentialRefreshRequest, CredentialRefreshResponse
from song_api.services.credential_service import StaticCookieRefresher

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/refresh-credentials", response_model=CredentialRefreshResponse)
async def admin_refresh_credentials(
    payload: Optional[CredentialRefreshRequest] = Body(None),
    context: ServiceContext = Depends(get_context),
    _: bool = Depends(verify_api_key),
):
    """
    Refresh the cookies used for YouTube extraction.

    With a "cookie" in the body, that cookie string replaces the configured
    one. Without a body, the configured credential refresher runs (the
    default refresher has no credential source and reports failure).

    On success the auth-failure counter resets and the refresh time is
    recorded; /health reports both.
    """
    refresher = None
    if payload is not None and payload.cookie:
        refresher = StaticCookieRefresher(context.settings, payload.cookie)

    success = context.refresh_credentials(refresher)
    last_refresh = context.last_credential_refresh
    result = CredentialRefreshResponse(
        success=success,
        auth_failures=context.auth_failures,
        last_cookie_refresh=last_refresh.isoformat() if last_refresh else None,
    )
    return JSONResponse(
        content=result.model_dump(by_alias=True),
        status_code=200 if success else 500,
    )


@router.delete("/cache")
async def admin_clear_cache(
    context: ServiceContext = Depends(get_context),
    _: bool = Depends(verify_api_key),
):
    """Drop every cached /song and /related response."""
    removed = context.cache.clear()
    return {"message": f"Cache cleared. Removed {removed} entries.", "removed": removed}
