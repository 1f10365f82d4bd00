"""
Download router module.

Provides GET /download/{video_id}: streams the highest-quality audio format
to the client as an attachment named after the video title.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from song_api.context import ServiceContext
from song_api.dependencies import enforce_rate_limit, get_context, valid_video_id
from song_api.models import ErrorResponse
from song_api.services.format_service import audio_candidates, select_formats
from song_api.services.stream_service import open_audio_stream
from song_api.services.ytdlp_service import YtdlpFetcher
from song_api.utils.filename_utils import create_audio_filename, encode_content_disposition_filename


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Download"])


@router.get(
    "/download/{video_id:path}",
    response_class=StreamingResponse,
    responses={
        200: {"content": {"audio/mpeg": {}}},
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def download_audio(
    video_id: str = Depends(valid_video_id),
    _: None = Depends(enforce_rate_limit),
    context: ServiceContext = Depends(get_context),
):
    """
    Download the audio of a video.

    The upstream bytes are passed through as they arrive; nothing is
    buffered or written to disk.

    Returns:
        StreamingResponse with Content-Type audio/mpeg and a
        Content-Disposition attachment filename ("<title>.mp3")
    """
    settings = context.settings
    info = await YtdlpFetcher(context).fetch_info(video_id)

    candidates = audio_candidates(info.get("formats") or [], settings.audio_mime_allowlist)
    selection = select_formats(
        candidates,
        preferred_codec=settings.preferred_audio_codec,
        threshold=settings.high_bitrate_threshold,
        video_id=video_id,
    )

    stream = await open_audio_stream(
        selection.high,
        settings,
        transport=context.http_transport,
        video_id=video_id,
    )

    filename = create_audio_filename(info.get("title") or video_id)
    headers = {"Content-Disposition": encode_content_disposition_filename(filename)}
    if stream.content_length:
        headers["Content-Length"] = stream.content_length
    if stream.content_encoding:
        headers["Content-Encoding"] = stream.content_encoding

    logger.info(f"Streaming {video_id} ({selection.high.codec}, {selection.high.bitrate:g} kbps)")
    return StreamingResponse(stream.iter_bytes(), media_type="audio/mpeg", headers=headers)
