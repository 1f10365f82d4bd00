"""
Song service module.

Reshapes yt-dlp metadata into the API's response models.
"""

from typing import Any, Dict, Iterable, List, Optional

from song_api.models.schemas import (
    AudioFormat,
    RelatedResponse,
    RelatedVideo,
    SongFormats,
    SongMeta,
    SongResponse,
)
from song_api.services.format_service import FormatCandidate, SelectionResult
from song_api.utils.duration_utils import parse_duration


def pick_thumbnail(info: Dict[str, Any]) -> Optional[str]:
    """Use "thumbnail" when present, else the largest entry of "thumbnails"."""
    if info.get("thumbnail"):
        return info["thumbnail"]

    best_url, best_area = None, -1
    for thumb in info.get("thumbnails") or []:
        url = thumb.get("url")
        if not url:
            continue
        area = (thumb.get("width") or 0) * (thumb.get("height") or 0)
        # Later entries win ties; yt-dlp lists thumbnails smallest first
        if area >= best_area:
            best_url, best_area = url, area
    return best_url


def to_audio_format(candidate: FormatCandidate) -> AudioFormat:
    return AudioFormat(
        url=candidate.url,
        bitrate=candidate.bitrate,
        codec=candidate.codec,
        container=candidate.container,
        content_length=candidate.content_length,
        sample_rate=candidate.sample_rate,
        mime_type=candidate.mime_type,
        format_id=candidate.format_id,
    )


def build_song_response(video_id: str, info: Dict[str, Any], selection: SelectionResult) -> SongResponse:
    return SongResponse(
        id=info.get("id") or video_id,
        title=info.get("title"),
        duration=parse_duration(info.get("duration")),
        thumbnail=pick_thumbnail(info),
        formats=SongFormats(
            high=to_audio_format(selection.high),
            low=to_audio_format(selection.low),
        ),
        audio_format_high=selection.high.url,
        audio_format_low=selection.low.url,
        meta=SongMeta(
            channel=info.get("channel") or info.get("uploader"),
            channel_id=info.get("channel_id") or info.get("uploader_id"),
            view_count=info.get("view_count"),
            is_live=bool(info.get("is_live")),
            upload_date=info.get("upload_date"),
        ),
    )


def build_related_response(video_id: str, entries: Iterable[Dict[str, Any]], limit: int) -> RelatedResponse:
    """Drop the seed video, id-less entries and duplicates, then cap at limit."""
    related: List[RelatedVideo] = []
    seen = {video_id}
    for entry in entries:
        entry_id = (entry or {}).get("id")
        if not entry_id or entry_id in seen:
            continue
        seen.add(entry_id)
        related.append(RelatedVideo(
            id=entry_id,
            title=entry.get("title"),
            author=entry.get("channel") or entry.get("uploader"),
            thumbnail=pick_thumbnail(entry),
            duration=parse_duration(entry.get("duration")),
        ))
        if len(related) >= limit:
            break
    return RelatedResponse(video_id=video_id, related=related)
