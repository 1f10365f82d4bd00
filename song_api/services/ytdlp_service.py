"""
YT-DLP service module.

Runs yt-dlp metadata extraction with a randomized user agent, optional
cookies and proxy, a fixed-delay retry loop, and classification of the
final error into the API's exception hierarchy.
"""

import asyncio
import logging
import random
import re
from typing import Any, Dict, List, Optional, Tuple

import yt_dlp

from song_api.config import Settings
from song_api.context import ServiceContext
from song_api.exceptions import GenericFailure, SongApiError, UpstreamBlocked, UpstreamUnavailable
from song_api.utils.video_id import build_mix_url, build_watch_url


logger = logging.getLogger(__name__)


USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
]

# Bot detection and throttling
BLOCKED_PATTERNS = [
    r'confirm you.?re not a bot',
    r'HTTP Error 403',
    r'HTTP Error 429',
    r'Too Many Requests',
]

# Missing, private or removed videos
UNAVAILABLE_PATTERNS = [
    r'Video unavailable',
    r'This video is not available',
    r'Private video',
    r'This video is private',
    r'This video has been removed',
    r'video does not exist',
    r'Incomplete YouTube ID',
    r'HTTP Error 404',
]

# Sign-in walls that are not plain bot checks
AUTH_PATTERNS = [
    r'Sign in to confirm your age',
    r'requires? authentication',
    r'age.restricted',
    r'members.?only',
    r'Join this channel',
    r'Sign in',
]


def pick_user_agent(rng: Optional[random.Random] = None) -> str:
    """Choose a user agent uniformly from USER_AGENTS."""
    return (rng or random).choice(USER_AGENTS)


def parse_cookie_string(raw: Optional[str]) -> List[Tuple[str, str]]:
    """
    Split "name=value; name2=value2" into (name, value) pairs.

    Empty segments and segments without a name are dropped. Values may
    themselves contain "=".
    """
    pairs = []
    for part in (raw or "").split(";"):
        part = part.strip()
        if not part or "=" not in part:
            continue
        name, value = part.split("=", 1)
        name = name.strip()
        if not name:
            continue
        pairs.append((name, value.strip()))
    return pairs


def build_cookie_header(pairs: List[Tuple[str, str]]) -> str:
    return "; ".join(f"{name}={value}" for name, value in pairs)


def build_ydl_options(settings: Settings, user_agent: str, **overrides) -> Dict[str, Any]:
    """Options for a metadata-only yt-dlp run."""
    headers = {
        "User-Agent": user_agent,
        "Accept-Language": "en-US,en;q=0.9",
    }
    cookies = parse_cookie_string(settings.youtube_cookie)
    if cookies:
        headers["Cookie"] = build_cookie_header(cookies)

    opts = {
        'quiet': True,
        'no_warnings': True,
        'skip_download': True,
        'noplaylist': True,
        'socket_timeout': settings.fetch_timeout,
        # Retries are handled by YtdlpFetcher
        'extractor_retries': 0,
        'http_headers': headers,
    }
    if settings.proxy_url:
        opts['proxy'] = settings.proxy_url
    opts.update(overrides)
    return opts


def _matches(patterns: List[str], text: str) -> bool:
    return any(re.search(pattern, text, re.IGNORECASE) for pattern in patterns)


def is_unavailable_error(error: BaseException) -> bool:
    text = str(error)
    return not _matches(BLOCKED_PATTERNS, text) and _matches(UNAVAILABLE_PATTERNS, text)


class YtdlpFetcher:
    """
    Metadata extraction for one request.

    Args:
        context: ServiceContext providing settings and the auth-failure counter
    """

    def __init__(self, context: ServiceContext) -> None:
        self.context = context
        self.settings: Settings = context.settings

    async def fetch_info(self, video_id: str) -> Dict[str, Any]:
        """Full metadata, including formats, for one video."""
        return await self._extract_with_retry(build_watch_url(video_id), video_id)

    async def fetch_related(self, video_id: str) -> List[Dict[str, Any]]:
        """
        Flat entries of the mix playlist YouTube generates for video_id.

        The first entry of a mix is usually the seed itself, so one extra
        entry is requested.
        """
        info = await self._extract_with_retry(
            build_mix_url(video_id),
            video_id,
            noplaylist=False,
            extract_flat='in_playlist',
            playlist_items=f"1:{self.settings.related_limit + 1}",
        )
        return list(info.get('entries') or [])

    def classify_error(self, error: BaseException, video_id: str) -> SongApiError:
        """Map the final extraction error to an API exception."""
        if isinstance(error, SongApiError):
            if error.video_id is None:
                error.video_id = video_id
            return error

        text = str(error)
        if _matches(BLOCKED_PATTERNS, text):
            self.context.record_auth_failure()
            return UpstreamBlocked(
                "YouTube blocked the request (bot check). Try again later",
                video_id=video_id,
            )
        if _matches(UNAVAILABLE_PATTERNS, text):
            return UpstreamUnavailable("Video is unavailable or private", video_id=video_id)
        if _matches(AUTH_PATTERNS, text):
            self.context.record_auth_failure()
            return UpstreamBlocked("Video requires sign-in", video_id=video_id)
        return GenericFailure(f"Failed to fetch video information: {text}", video_id=video_id)

    async def _extract_with_retry(self, url: str, video_id: str, **overrides) -> Dict[str, Any]:
        attempts = self.settings.fetch_retries
        delay = self.settings.fetch_retry_delay
        last_error: Optional[BaseException] = None

        for attempt in range(1, attempts + 1):
            opts = build_ydl_options(self.settings, pick_user_agent(), **overrides)
            try:
                info = await asyncio.to_thread(self._extract, url, opts)
                if attempt > 1:
                    logger.info(f"Extraction for {video_id} succeeded on attempt {attempt}")
                return info
            except Exception as e:
                last_error = e
                if is_unavailable_error(e):
                    # Unavailable videos are not retried
                    break
                if attempt < attempts:
                    logger.warning(
                        f"Extraction attempt {attempt}/{attempts} for {video_id} failed: {e}. "
                        f"Retrying in {delay:g}s"
                    )
                    await asyncio.sleep(delay)

        error = self.classify_error(last_error, video_id)
        logger.error(f"Extraction for {video_id} failed: {error.error_code}: {last_error}")
        if error is last_error:
            raise error
        raise error from last_error

    @staticmethod
    def _extract(url: str, opts: Dict[str, Any]) -> Dict[str, Any]:
        with yt_dlp.YoutubeDL(opts) as ydl:
            info = ydl.extract_info(url, download=False)
        if not info:
            raise GenericFailure("yt-dlp returned no metadata")
        return info
