"""
Pydantic models for API responses.

Field names are snake_case in Python and camelCase on the wire
(alias_generator=to_camel), so handlers dump with by_alias=True.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AudioFormat(CamelModel):
    """One selected audio stream: url plus bitrate/codec/container annotations."""
    url: str
    bitrate: Optional[float] = None
    codec: Optional[str] = None
    container: Optional[str] = None
    content_length: Optional[int] = None
    sample_rate: Optional[int] = None
    mime_type: Optional[str] = None
    format_id: Optional[str] = None


class SongFormats(CamelModel):
    high: AudioFormat
    low: AudioFormat


class SongMeta(CamelModel):
    channel: Optional[str] = None
    channel_id: Optional[str] = None
    view_count: Optional[int] = None
    is_live: bool = False
    upload_date: Optional[str] = None


class SongResponse(CamelModel):
    """Response for GET /song/{video_id}."""
    id: str
    title: Optional[str] = None
    duration: Optional[int] = Field(None, description="Duration in seconds")
    thumbnail: Optional[str] = None
    formats: SongFormats
    audio_format_high: str = Field(..., description="Same as formats.high.url")
    audio_format_low: str = Field(..., description="Same as formats.low.url")
    meta: SongMeta


class RelatedVideo(CamelModel):
    id: str
    title: Optional[str] = None
    author: Optional[str] = None
    thumbnail: Optional[str] = None
    duration: Optional[int] = None


class RelatedResponse(CamelModel):
    """Response for GET /related/{video_id}."""
    video_id: str
    related: List[RelatedVideo]


class MemoryUsage(CamelModel):
    rss: int
    vms: int


class HealthResponse(CamelModel):
    """Response for GET /health."""
    status: str
    uptime: float = Field(..., description="Seconds since the process context was created")
    memory_usage: MemoryUsage
    auth_failures: int
    last_cookie_refresh: Optional[str] = None
    environment: str
    cache: Dict[str, int]
    rate_limited_clients: int


class ErrorResponse(CamelModel):
    error: str
    message: str
    video_id: Optional[str] = None


class CredentialRefreshRequest(CamelModel):
    """Optional replacement cookie string for POST /admin/refresh-credentials."""
    cookie: Optional[str] = Field(None, description="New 'name=value; ...' cookie string")


class CredentialRefreshResponse(CamelModel):
    success: bool
    auth_failures: int
    last_cookie_refresh: Optional[str] = None
