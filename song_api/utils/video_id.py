"""
Video identifier utilities.

This module provides utilities for:
- Validating bare 11-character YouTube video ids
- Extracting the id from watch / short / embed URLs
- Building canonical watch and mix-playlist URLs
"""

import re
from urllib.parse import urlparse, parse_qs

from song_api.exceptions import InvalidIdentifier


VIDEO_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]{11}$')

YOUTUBE_HOSTS = {
    'youtube.com',
    'www.youtube.com',
    'm.youtube.com',
    'music.youtube.com',
    'youtube-nocookie.com',
    'www.youtube-nocookie.com',
}

# Path prefixes that carry the id as the next path segment
_PATH_PREFIXES = ('shorts', 'embed', 'live', 'v')


def is_valid_video_id(value: str) -> bool:
    """Check if value is a bare YouTube video id."""
    return bool(value) and VIDEO_ID_PATTERN.match(value) is not None


def _id_from_url(value: str):
    parsed = urlparse(value if '://' in value else f'https://{value}')
    host = (parsed.hostname or '').lower()

    if host in ('youtu.be', 'www.youtu.be'):
        candidate = parsed.path.lstrip('/').split('/')[0]
        return candidate or None

    if host not in YOUTUBE_HOSTS:
        return None

    if parsed.path.rstrip('/') == '/watch':
        values = parse_qs(parsed.query).get('v')
        return values[0] if values else None

    segments = [s for s in parsed.path.split('/') if s]
    if len(segments) >= 2 and segments[0] in _PATH_PREFIXES:
        return segments[1]
    return None


def extract_video_id(value: str) -> str:
    """
    Return the 11-character video id from a bare id or a YouTube URL.

    Accepts:
        dQw4w9WgXcQ
        https://www.youtube.com/watch?v=dQw4w9WgXcQ
        https://youtu.be/dQw4w9WgXcQ
        https://www.youtube.com/shorts/dQw4w9WgXcQ
        https://www.youtube.com/embed/dQw4w9WgXcQ

    Raises:
        InvalidIdentifier: if no valid id can be found
    """
    value = (value or '').strip()
    if is_valid_video_id(value):
        return value

    if '/' in value or '.' in value:
        candidate = _id_from_url(value)
        if candidate and is_valid_video_id(candidate):
            return candidate

    raise InvalidIdentifier(
        "Invalid YouTube video id. Expected 11 characters of [A-Za-z0-9_-] or a YouTube URL",
        video_id=value or None,
    )


def build_watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def build_mix_url(video_id: str) -> str:
    """URL of the auto-generated mix playlist seeded by video_id."""
    return f"https://www.youtube.com/watch?v={video_id}&list=RD{video_id}"
