"""
Song router module.

Provides GET /song/{video_id}: title, duration, thumbnail, channel metadata
and the selected high/low audio stream URLs for one video.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from song_api.context import ServiceContext
from song_api.dependencies import enforce_rate_limit, get_context, valid_video_id
from song_api.models import ErrorResponse, SongResponse
from song_api.services.format_service import audio_candidates, select_formats
from song_api.services.song_service import build_song_response
from song_api.services.ytdlp_service import YtdlpFetcher


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Song"])


def cache_key_for(request: Request) -> str:
    """Full request path, plus the query string when there is one."""
    if request.url.query:
        return f"{request.url.path}?{request.url.query}"
    return request.url.path


@router.get(
    "/song/{video_id:path}",
    response_model=SongResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def get_song(
    request: Request,
    video_id: str = Depends(valid_video_id),
    _: None = Depends(enforce_rate_limit),
    context: ServiceContext = Depends(get_context),
):
    """
    Get audio stream URLs and metadata for a video.

    The "high" pick prefers the configured codec above the bitrate threshold,
    the "low" pick the same codec at or below it; both fall back to the
    overall highest / lowest audio-only bitrate.

    Responses are cached per request path for CACHE_TTL_SECONDS.
    """
    cache_key = cache_key_for(request)
    cached = context.cache.get(cache_key)
    if cached is not None:
        logger.debug(f"Cache hit for {cache_key}")
        return JSONResponse(content=cached, headers={"X-Cache": "HIT"})

    settings = context.settings
    info = await YtdlpFetcher(context).fetch_info(video_id)

    candidates = audio_candidates(info.get("formats") or [], settings.audio_mime_allowlist)
    selection = select_formats(
        candidates,
        preferred_codec=settings.preferred_audio_codec,
        threshold=settings.high_bitrate_threshold,
        video_id=video_id,
    )

    body = build_song_response(video_id, info, selection).model_dump(by_alias=True)
    context.cache.put(cache_key, body)
    return JSONResponse(content=body, headers={"X-Cache": "MISS"})
