"""
Process context shared by every request handler.

All mutable process state lives here instead of in module globals: the
response cache, the rate limiter, the auth-failure counter and the last
credential refresh time. One ServiceContext is created per application and
stored on app.state; handlers receive it through Depends(get_context).
"""

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Optional

import httpx

from song_api.config import Settings
from song_api.services.cache_service import ResponseCache
from song_api.services.credential_service import CredentialRefresher, NoopCredentialRefresher
from song_api.services.rate_limit_service import FixedWindowRateLimiter


logger = logging.getLogger(__name__)


class ServiceContext:
    """Settings plus the process-wide mutable state."""

    def __init__(
        self,
        settings: Settings,
        cache: Optional[ResponseCache] = None,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
        credential_refresher: Optional[CredentialRefresher] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self.cache = cache if cache is not None else ResponseCache(
            max_entries=settings.cache_max_entries,
            default_ttl=settings.cache_ttl_seconds,
        )
        self.rate_limiter = rate_limiter if rate_limiter is not None else FixedWindowRateLimiter(
            max_requests=settings.rate_limit_max_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
        self.credential_refresher = (
            credential_refresher if credential_refresher is not None else NoopCredentialRefresher()
        )
        # Tests inject httpx.MockTransport here
        self.http_transport = http_transport

        self.started_at = time.monotonic()
        self.last_credential_refresh: Optional[datetime] = None
        self._auth_failures = 0
        self._lock = threading.Lock()

    @property
    def auth_failures(self) -> int:
        with self._lock:
            return self._auth_failures

    def record_auth_failure(self) -> int:
        """Count one bot-check / sign-in failure. Returns the new total."""
        with self._lock:
            self._auth_failures += 1
            total = self._auth_failures
        logger.warning(f"YouTube blocked an extraction request (auth failures: {total})")
        return total

    def refresh_credentials(self, refresher: Optional[CredentialRefresher] = None) -> bool:
        """
        Run the configured credential refresher, or the one given.

        On success the refresh time is recorded and the auth-failure counter
        starts again from zero.
        """
        if not (refresher or self.credential_refresher).refresh():
            return False
        with self._lock:
            self._auth_failures = 0
            self.last_credential_refresh = datetime.now(timezone.utc)
        return True

    def uptime(self) -> float:
        return time.monotonic() - self.started_at
