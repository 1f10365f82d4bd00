"""
Stream service module.

Opens the selected audio format on YouTube's media host and passes the
bytes through to the client without buffering the file.
"""

import logging
from typing import AsyncIterator, Optional

import httpx

from song_api.config import Settings
from song_api.exceptions import TransientFetchFailure
from song_api.services.format_service import FormatCandidate


logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class AudioStream:
    """An open upstream response and the client that owns it."""

    def __init__(self, client: httpx.AsyncClient, response: httpx.Response, video_id: Optional[str] = None):
        self.client = client
        self.response = response
        self.video_id = video_id

    @property
    def content_length(self) -> Optional[str]:
        return self.response.headers.get("content-length")

    @property
    def content_encoding(self) -> Optional[str]:
        return self.response.headers.get("content-encoding")

    async def iter_bytes(self, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
        sent = 0
        try:
            # Raw bytes: Content-Length is forwarded, so no content decoding
            async for chunk in self.response.aiter_raw(chunk_size):
                sent += len(chunk)
                yield chunk
        except httpx.HTTPError as e:
            # Headers are already sent; the client sees a truncated body
            logger.error(f"Audio stream for {self.video_id} broke after {sent} bytes: {e}")
            raise
        finally:
            await self.aclose()
        logger.info(f"Audio stream for {self.video_id} finished ({sent} bytes)")

    async def aclose(self) -> None:
        await self.response.aclose()
        await self.client.aclose()


async def open_audio_stream(
    candidate: FormatCandidate,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    video_id: Optional[str] = None,
) -> AudioStream:
    """
    Start a GET for the candidate url and return once headers arrive.

    Raises:
        TransientFetchFailure: on transport errors or a non-2xx upstream status
    """
    headers = dict(candidate.http_headers or {})
    client_kwargs = {
        "timeout": httpx.Timeout(settings.fetch_timeout),
        "follow_redirects": True,
    }
    if transport is not None:
        client_kwargs["transport"] = transport
    elif settings.proxy_url:
        client_kwargs["proxy"] = settings.proxy_url

    client = httpx.AsyncClient(**client_kwargs)
    request = client.build_request("GET", candidate.url, headers=headers)
    try:
        response = await client.send(request, stream=True)
    except httpx.HTTPError as e:
        await client.aclose()
        raise TransientFetchFailure(f"Download failed: {e}", video_id=video_id) from e

    if response.status_code >= 400:
        await response.aclose()
        await client.aclose()
        raise TransientFetchFailure(
            f"Download failed: upstream returned HTTP {response.status_code}",
            video_id=video_id,
        )

    return AudioStream(client, response, video_id=video_id)
