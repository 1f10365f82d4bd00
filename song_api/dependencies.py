"""
FastAPI dependency injection functions.

This module provides reusable dependencies for:
- Access to the process-wide ServiceContext
- Video id validation (runs before any network call)
- Per-client fixed-window rate limiting
- API key verification for admin endpoints
"""

import logging

from fastapi import Header, HTTPException, Path, Request

from song_api.config import Settings
from song_api.context import ServiceContext
from song_api.exceptions import RateLimitExceeded
from song_api.utils.video_id import extract_video_id


logger = logging.getLogger(__name__)


def get_context(request: Request) -> ServiceContext:
    return request.app.state.context


def valid_video_id(
    request: Request,
    video_id: str = Path(..., description="11-character YouTube video id or a YouTube URL"),
) -> str:
    """
    Dependency returning the normalized video id. Raises InvalidIdentifier (400).

    An unencoded URL such as /song/https://www.youtube.com/watch?v=ID splits
    at "?", leaving the v= parameter in the request query string; it is
    joined back onto the URL before extraction.
    """
    query = request.url.query
    if query and "/" in video_id and "?" not in video_id:
        video_id = f"{video_id}?{query}"
    return extract_video_id(video_id)


def client_address(request: Request, settings: Settings) -> str:
    """Client key for rate limiting: first X-Forwarded-For hop when trusted, else the peer address."""
    if settings.trust_proxy:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first_hop = forwarded.split(",")[0].strip()
            if first_hop:
                return first_hop
    return request.client.host if request.client else "unknown"


def enforce_rate_limit(request: Request) -> None:
    """
    Dependency admitting the request against the client's quota.

    The decision is kept on request.state so the request middleware can add
    RateLimit-* headers to whatever response is produced.

    Raises:
        RateLimitExceeded (429) once the client's quota for the window is used
    """
    context = get_context(request)
    client = client_address(request, context.settings)
    decision = context.rate_limiter.admit(client)
    request.state.rate_limit = decision

    if not decision.allowed:
        logger.info(f"Rate limit exceeded for {client}")
        raise RateLimitExceeded(
            "Too many requests, please try again later.",
            limit=decision.limit,
            reset_after=decision.reset_after,
        )


def verify_api_key(request: Request, x_api_key: str = Header(None)) -> bool:
    """
    Dependency to verify API key from request header.
    Raises HTTPException 401 if invalid, 500 if not configured.
    """
    settings = get_context(request).settings
    if not settings.api_key:
        raise HTTPException(status_code=500, detail="API key not configured")
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid API Key")
    return True
