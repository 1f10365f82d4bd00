"""
Configuration module for the song API.

This module centralizes all environment variables and runtime configuration
using pydantic-settings for type-safe configuration management.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server
    host: str = Field(
        default="0.0.0.0",
        validation_alias="HOST",
        description="Interface the HTTP server binds to"
    )

    port: int = Field(
        default=5000,
        validation_alias="PORT",
        description="Listening port"
    )

    environment: str = Field(
        default="development",
        validation_alias="ENVIRONMENT",
        description="Deployment environment name (development, production, ...)"
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level for the song_api logger"
    )

    # CORS Configuration
    allowed_origins: str = Field(
        default="*",
        validation_alias="ALLOWED_ORIGINS",
        description="Comma-separated CORS origins, or * for any origin"
    )

    # API Authentication (admin endpoints only)
    api_key: str = Field(
        default="",
        validation_alias="API_KEY",
        description="API key for admin endpoint authentication"
    )

    # Extraction Configuration
    youtube_cookie: Optional[str] = Field(
        default=None,
        validation_alias="YOUTUBE_COOKIE",
        description="Cookie string sent to YouTube, e.g. 'SID=...; HSID=...'"
    )

    proxy_url: Optional[str] = Field(
        default=None,
        validation_alias="PROXY_URL",
        description="Outbound proxy for extraction and audio streaming"
    )

    fetch_timeout: float = Field(
        default=30.0,
        validation_alias="FETCH_TIMEOUT",
        description="Socket timeout in seconds for each extraction attempt"
    )

    fetch_retries: int = Field(
        default=3,
        ge=1,
        validation_alias="FETCH_RETRIES",
        description="Total extraction attempts before giving up"
    )

    fetch_retry_delay: float = Field(
        default=1.0,
        ge=0,
        validation_alias="FETCH_RETRY_DELAY",
        description="Fixed delay in seconds between extraction attempts"
    )

    # Response Cache
    cache_ttl_seconds: int = Field(
        default=3600,
        validation_alias="CACHE_TTL_SECONDS",
        description="Time-to-live for cached responses in seconds"
    )

    cache_max_entries: int = Field(
        default=1024,
        ge=1,
        validation_alias="CACHE_MAX_ENTRIES",
        description="Maximum number of cached responses"
    )

    # Rate Limiting
    rate_limit_max_requests: int = Field(
        default=100,
        ge=1,
        validation_alias="RATE_LIMIT_MAX_REQUESTS",
        description="Requests allowed per client within one window"
    )

    rate_limit_window_seconds: int = Field(
        default=900,
        ge=1,
        validation_alias="RATE_LIMIT_WINDOW_SECONDS",
        description="Fixed rate limit window in seconds (15 minutes)"
    )

    trust_proxy: bool = Field(
        default=False,
        validation_alias="TRUST_PROXY",
        description="Use the first X-Forwarded-For hop as the client address"
    )

    # Format Selection
    preferred_audio_codec: str = Field(
        default="opus",
        validation_alias="PREFERRED_AUDIO_CODEC",
        description="Codec preferred when picking high/low audio formats"
    )

    high_bitrate_threshold: float = Field(
        default=128,
        validation_alias="HIGH_BITRATE_THRESHOLD",
        description="Bitrate (kbps) separating high from low picks"
    )

    allowed_audio_mime_types: str = Field(
        default="",
        validation_alias="ALLOWED_AUDIO_MIME_TYPES",
        description="Comma-separated audio mime allowlist, empty for any"
    )

    related_limit: int = Field(
        default=20,
        ge=1,
        validation_alias="RELATED_LIMIT",
        description="Maximum number of related videos returned"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def cors_origins(self) -> List[str]:
        """Parsed CORS origins; ["*"] when unset or wildcard."""
        origins = [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
        if not origins or "*" in origins:
            return ["*"]
        return origins

    @property
    def audio_mime_allowlist(self) -> List[str]:
        return [m.strip().lower() for m in self.allowed_audio_mime_types.split(",") if m.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()
