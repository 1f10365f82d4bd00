"""
Related videos router.

Provides GET /related/{video_id}, built from the mix playlist YouTube
generates for the video.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from song_api.context import ServiceContext
from song_api.dependencies import enforce_rate_limit, get_context, valid_video_id
from song_api.models import ErrorResponse, RelatedResponse
from song_api.routers.song import cache_key_for
from song_api.services.song_service import build_related_response
from song_api.services.ytdlp_service import YtdlpFetcher


router = APIRouter(tags=["Related"])


@router.get(
    "/related/{video_id:path}",
    response_model=RelatedResponse,
    responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_related(
    request: Request,
    video_id: str = Depends(valid_video_id),
    _: None = Depends(enforce_rate_limit),
    context: ServiceContext = Depends(get_context),
):
    """List videos related to video_id (id, title, author, thumbnail, duration)."""
    cache_key = cache_key_for(request)
    cached = context.cache.get(cache_key)
    if cached is not None:
        return JSONResponse(content=cached, headers={"X-Cache": "HIT"})

    entries = await YtdlpFetcher(context).fetch_related(video_id)
    body = build_related_response(
        video_id, entries, limit=context.settings.related_limit
    ).model_dump(by_alias=True)

    context.cache.put(cache_key, body)
    return JSONResponse(content=body, headers={"X-Cache": "MISS"})
