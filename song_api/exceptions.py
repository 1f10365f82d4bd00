"""
Exception hierarchy for the song API.

Every failure a handler can surface maps to a subclass of SongApiError.
Raw yt-dlp and httpx exceptions are caught in the service layer and
re-raised as one of these; the exception handlers in main.py render them
as JSON with the matching HTTP status.

Hierarchy
---------
SongApiError
├── InvalidIdentifier       400
├── UpstreamUnavailable     404
├── UpstreamBlocked         403
├── NoPlayableFormat        404
├── RateLimitExceeded       429
├── TransientFetchFailure   500
└── GenericFailure          500
"""

from typing import Dict, Optional


class SongApiError(Exception):
    """Base exception for all song API errors."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, *, video_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.video_id = video_id

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return None

    def to_dict(self) -> dict:
        return {
            "error": self.error_code,
            "message": self.message,
            "videoId": self.video_id,
        }


# --- Client input ----------------------------------------------------------

class InvalidIdentifier(SongApiError):
    """Raised when the path parameter is not a valid YouTube video id."""

    status_code = 400
    error_code = "invalid_video_id"


class RateLimitExceeded(SongApiError):
    """Raised when a client exceeds its request quota for the current window."""

    status_code = 429
    error_code = "rate_limited"

    def __init__(self, message: str, *, limit: int, reset_after: int,
                 video_id: Optional[str] = None) -> None:
        super().__init__(message, video_id=video_id)
        self.limit = limit
        self.reset_after = reset_after

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": "0",
            "RateLimit-Reset": str(self.reset_after),
            "Retry-After": str(self.reset_after),
        }


# --- Upstream extraction ---------------------------------------------------

class UpstreamUnavailable(SongApiError):
    """Raised when the video is unavailable, private or removed."""

    status_code = 404
    error_code = "video_unavailable"


class UpstreamBlocked(SongApiError):
    """Raised when YouTube answers with bot detection or a sign-in wall."""

    status_code = 403
    error_code = "upstream_blocked"


class NoPlayableFormat(SongApiError):
    """Raised when no audio-only format survives filtering."""

    status_code = 404
    error_code = "no_playable_format"


class TransientFetchFailure(SongApiError):
    """Raised when the upstream audio stream cannot be opened."""

    status_code = 500
    error_code = "upstream_stream_failed"


class GenericFailure(SongApiError):
    """Catch-all for failures that match no other category."""

    status_code = 500
    error_code = "internal_error"
