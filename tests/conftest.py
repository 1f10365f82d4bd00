"""
Pytest configuration and shared fixtures for test suite.

This module provides:
- Test settings and a ServiceContext driven by a fake clock
- Async test client for the FastAPI app
- Mock yt-dlp responses
- Shared test utilities
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from unittest.mock import patch, MagicMock

from song_api.config import Settings
from song_api.context import ServiceContext
from song_api.services.cache_service import ResponseCache
from song_api.services.rate_limit_service import FixedWindowRateLimiter


VIDEO_ID = "dQw4w9WgXcQ"


class FakeClock:
    """Callable monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    """Settings for tests; .env is ignored."""
    return Settings(
        _env_file=None,
        api_key="test-api-key",
        allowed_origins="*",
        environment="test",
        log_level="WARNING",
        fetch_retries=3,
        fetch_retry_delay=0,
        cache_ttl_seconds=60,
        cache_max_entries=100,
        rate_limit_max_requests=5,
        rate_limit_window_seconds=900,
    )


@pytest.fixture
def context(settings, clock):
    return ServiceContext(
        settings,
        cache=ResponseCache(
            max_entries=settings.cache_max_entries,
            default_ttl=settings.cache_ttl_seconds,
            timer=clock,
        ),
        rate_limiter=FixedWindowRateLimiter(
            max_requests=settings.rate_limit_max_requests,
            window_seconds=settings.rate_limit_window_seconds,
            timer=clock,
        ),
    )


@pytest.fixture
def app(context):
    from main import create_app

    return create_app(context=context)


@pytest_asyncio.fixture
async def client(app):
    """
    Create async test client for FastAPI app.

    Uses httpx AsyncClient with ASGITransport to test the FastAPI app
    without needing to run a server.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def api_headers():
    """Return headers with API key."""
    return {"X-API-Key": "test-api-key"}


@pytest.fixture
def video_id():
    return VIDEO_ID


@pytest.fixture
def mock_formats():
    """yt-dlp formats: three audio-only, one muxed, one storyboard."""
    return [
        {
            "format_id": "249",
            "url": "https://rr1.googlevideo.com/videoplayback?itag=249",
            "vcodec": "none",
            "acodec": "opus",
            "abr": 50.0,
            "ext": "webm",
            "audio_ext": "webm",
            "filesize": 1_300_000,
            "asr": 48000,
            "http_headers": {"User-Agent": "test-agent"},
        },
        {
            "format_id": "251",
            "url": "https://rr1.googlevideo.com/videoplayback?itag=251",
            "vcodec": "none",
            "acodec": "opus",
            "abr": 160.0,
            "ext": "webm",
            "audio_ext": "webm",
            "filesize": 3_400_000,
            "asr": 48000,
            "http_headers": {"User-Agent": "test-agent"},
        },
        {
            "format_id": "140",
            "url": "https://rr1.googlevideo.com/videoplayback?itag=140",
            "vcodec": "none",
            "acodec": "mp4a.40.2",
            "abr": 129.5,
            "ext": "m4a",
            "audio_ext": "m4a",
            "filesize": 3_100_000,
            "asr": 44100,
        },
        {
            "format_id": "18",
            "url": "https://rr1.googlevideo.com/videoplayback?itag=18",
            "vcodec": "avc1.42001E",
            "acodec": "mp4a.40.2",
            "abr": 96.0,
            "ext": "mp4",
            "filesize": 9_000_000,
        },
        {
            "format_id": "sb0",
            "url": "https://i.ytimg.com/sb/dQw4w9WgXcQ/storyboard3_L0/default.jpg",
            "vcodec": "none",
            "acodec": "none",
            "ext": "mhtml",
        },
    ]


@pytest.fixture
def mock_ytdlp_info(mock_formats):
    """Mock yt-dlp video info response."""
    return {
        "id": VIDEO_ID,
        "title": "Test Song Title",
        "duration": 213,
        "thumbnail": "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
        "channel": "Test Channel",
        "channel_id": "UCtestchannel",
        "uploader": "Test Channel",
        "view_count": 1000,
        "is_live": False,
        "upload_date": "20240101",
        "formats": mock_formats,
    }


@pytest.fixture
def mock_related_entries():
    """Flat entries of a mix playlist; the seed comes first."""
    return [
        {"id": VIDEO_ID, "title": "Test Song Title", "channel": "Test Channel", "duration": 213},
        {
            "id": "yPYZpwSpKmA",
            "title": "Related One",
            "channel": "Channel One",
            "duration": 240,
            "thumbnails": [
                {"url": "https://i.ytimg.com/vi/yPYZpwSpKmA/default.jpg", "width": 120, "height": 90},
                {"url": "https://i.ytimg.com/vi/yPYZpwSpKmA/hqdefault.jpg", "width": 480, "height": 360},
            ],
        },
        {"title": "Entry without id"},
        {"id": "9bZkp7q19f0", "title": "Related Two", "uploader": "Channel Two", "duration": "PT4M12S"},
    ]


@pytest.fixture
def mock_ytdlp():
    """
    Patch yt_dlp.YoutubeDL.

    Yields the YoutubeDL instance mock; set extract_info.return_value or
    extract_info.side_effect in the test.
    """
    with patch("yt_dlp.YoutubeDL") as mock_class:
        mock_instance = MagicMock()
        mock_class.return_value.__enter__.return_value = mock_instance
        yield mock_instance
