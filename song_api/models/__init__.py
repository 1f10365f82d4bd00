"""
Models package for API response validation.

This package contains the Pydantic models used by the routers to shape
and document API responses.
"""

from .schemas import (
    AudioFormat,
    SongFormats,
    SongMeta,
    SongResponse,
    RelatedVideo,
    RelatedResponse,
    MemoryUsage,
    HealthResponse,
    ErrorResponse,
    CredentialRefreshRequest,
    CredentialRefreshResponse,
)

__all__ = [
    "AudioFormat",
    "SongFormats",
    "SongMeta",
    "SongResponse",
    "RelatedVideo",
    "RelatedResponse",
    "MemoryUsage",
    "HealthResponse",
    "ErrorResponse",
    "CredentialRefreshRequest",
    "CredentialRefreshResponse",
]
