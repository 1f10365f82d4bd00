"""
Credential refresh service.

YouTube cookies go stale and bot checks start failing extraction. This
module defines the hook the service calls to renew them. The default
refresher does nothing and reports failure; deployments that can renew
cookies (a scheduled browser login, a secrets manager, ...) plug in their
own implementation through ServiceContext.
"""

import logging
from typing import Protocol, runtime_checkable

from song_api.config import Settings


logger = logging.getLogger(__name__)


@runtime_checkable
class CredentialRefresher(Protocol):
    """Renews the cookies used for extraction. Returns True on success."""

    def refresh(self) -> bool:
        ...


class NoopCredentialRefresher:
    """Default refresher: no credential source is configured."""

    def refresh(self) -> bool:
        logger.warning("Credential refresh requested but no refresher is configured")
        return False


class StaticCookieRefresher:
    """
    Swap in a new cookie string supplied by the caller.

    Useful for operators pushing fresh cookies through the admin endpoint
    without restarting the process.
    """

    def __init__(self, settings: Settings, cookie: str) -> None:
        self.settings = settings
        self.cookie = cookie

    def refresh(self) -> bool:
        if not self.cookie or not self.cookie.strip():
            return False
        self.settings.youtube_cookie = self.cookie.strip()
        logger.info("YouTube cookie replaced")
        return True
