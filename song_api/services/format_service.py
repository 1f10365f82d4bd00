"""
Audio format filtering and high/low selection.

Every function in this module is a pure transformation over the format
list yt-dlp returns: no I/O, deterministic, and unit-testable.

Pipeline:

1. Convert - yt-dlp format dicts become FormatCandidate records.
2. Filter  - keep audio-only entries with a url, a known bitrate and a
             positive content length (optionally a mime allowlist).
3. Select  - pick a "high" and a "low" candidate under the codec preference.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from song_api.exceptions import NoPlayableFormat


@dataclass(frozen=True)
class FormatCandidate:
    """One playable audio representation, as reported by yt-dlp."""
    url: str
    bitrate: Optional[float]
    codec: Optional[str]
    container: Optional[str]
    content_length: Optional[int]
    sample_rate: Optional[int] = None
    mime_type: Optional[str] = None
    format_id: Optional[str] = None
    audio_only: bool = True
    http_headers: Optional[Dict[str, str]] = None

    @classmethod
    def from_ytdlp(cls, fmt: Dict[str, Any]) -> "FormatCandidate":
        vcodec = fmt.get("vcodec")
        acodec = fmt.get("acodec")
        container = fmt.get("audio_ext") if fmt.get("audio_ext") not in (None, "none") else fmt.get("ext")
        bitrate = fmt.get("abr") or fmt.get("tbr")
        content_length = fmt.get("filesize") or fmt.get("filesize_approx")
        return cls(
            url=fmt.get("url") or "",
            bitrate=float(bitrate) if bitrate else None,
            codec=_normalize_codec(acodec),
            container=container,
            content_length=int(content_length) if content_length else None,
            sample_rate=int(fmt["asr"]) if fmt.get("asr") else None,
            mime_type=_mime_type(container),
            format_id=fmt.get("format_id"),
            audio_only=vcodec == "none" and acodec not in (None, "none"),
            http_headers=fmt.get("http_headers"),
        )


@dataclass(frozen=True)
class SelectionResult:
    """High/low pair. Both slots hold the same candidate when only one qualifies."""
    high: FormatCandidate
    low: FormatCandidate


def _normalize_codec(acodec: Optional[str]) -> Optional[str]:
    """Strip the codec profile: mp4a.40.2 -> mp4a."""
    if not acodec or acodec == "none":
        return None
    return acodec.split(".")[0].lower()


def _mime_type(container: Optional[str]) -> Optional[str]:
    if not container:
        return None
    if container in ("m4a", "mp4"):
        return "audio/mp4"
    return f"audio/{container}"


# ---------------------------------------------------------------------------
# 1. Convert + 2. Filter
# ---------------------------------------------------------------------------

def is_playable(candidate: FormatCandidate) -> bool:
    return (
        candidate.audio_only
        and bool(candidate.url)
        and candidate.bitrate is not None
        and candidate.content_length is not None
        and candidate.content_length > 0
    )


def audio_candidates(
    formats: Iterable[Dict[str, Any]],
    allowed_mime_types: Sequence[str] = (),
) -> List[FormatCandidate]:
    """
    Return playable audio-only candidates in yt-dlp's order.

    An empty allowed_mime_types disables the mime check.
    """
    allowed = {m.lower() for m in allowed_mime_types}
    candidates = []
    for fmt in formats or []:
        candidate = FormatCandidate.from_ytdlp(fmt)
        if not is_playable(candidate):
            continue
        if allowed and (candidate.mime_type or "").lower() not in allowed:
            continue
        candidates.append(candidate)
    return candidates


# ---------------------------------------------------------------------------
# 3. Select
# ---------------------------------------------------------------------------

def _highest(candidates: Sequence[FormatCandidate]) -> FormatCandidate:
    # max() keeps the first of equal bitrates
    return max(candidates, key=lambda c: c.bitrate)


def _lowest(candidates: Sequence[FormatCandidate]) -> FormatCandidate:
    return min(candidates, key=lambda c: c.bitrate)


def select_formats(
    candidates: Sequence[FormatCandidate],
    preferred_codec: Optional[str] = "opus",
    threshold: float = 128,
    video_id: Optional[str] = None,
) -> SelectionResult:
    """
    Pick the "high" and "low" audio formats.

    high: best preferred-codec candidate above threshold, otherwise the
          overall highest bitrate.
    low:  lowest preferred-codec candidate at or below threshold, otherwise
          the overall lowest bitrate.

    Raises:
        NoPlayableFormat: if candidates is empty
    """
    rated = [c for c in candidates if c.bitrate is not None]
    if not rated:
        raise NoPlayableFormat("No playable audio format found", video_id=video_id)

    codec = (preferred_codec or "").lower()
    preferred = [c for c in rated if codec and c.codec == codec]

    high_pool = [c for c in preferred if c.bitrate > threshold]
    high = _highest(high_pool) if high_pool else _highest(rated)

    low_pool = [c for c in preferred if c.bitrate <= threshold]
    low = _lowest(low_pool) if low_pool else _lowest(rated)

    if low.bitrate > high.bitrate:
        high, low = _highest(rated), _lowest(rated)

    return SelectionResult(high=high, low=low)
