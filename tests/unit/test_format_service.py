"""
Unit tests for song_api/services/format_service.py.

This module tests:
- Conversion of yt-dlp format dicts
- Audio-only filtering (url, bitrate, content length, mime allowlist)
- High/low selection under the codec preference
"""

import pytest

from song_api.exceptions import NoPlayableFormat
from song_api.services.format_service import (
    FormatCandidate,
    audio_candidates,
    select_formats,
)


def candidate(bitrate, codec="opus", container="webm", url=None, length=1000):
    return FormatCandidate(
        url=url or f"https://media.example/{codec}-{bitrate}",
        bitrate=bitrate,
        codec=codec,
        container=container,
        content_length=length,
    )


class TestFromYtdlp:
    """Test FormatCandidate.from_ytdlp."""

    def test_audio_only_format(self, mock_formats):
        fmt = FormatCandidate.from_ytdlp(mock_formats[2])
        assert fmt.audio_only
        assert fmt.codec == "mp4a"
        assert fmt.container == "m4a"
        assert fmt.mime_type == "audio/mp4"
        assert fmt.bitrate == 129.5
        assert fmt.content_length == 3_100_000
        assert fmt.sample_rate == 44100
        assert fmt.format_id == "140"

    def test_muxed_format_is_not_audio_only(self, mock_formats):
        assert not FormatCandidate.from_ytdlp(mock_formats[3]).audio_only

    def test_bitrate_falls_back_to_tbr(self):
        fmt = FormatCandidate.from_ytdlp({
            "url": "https://x", "vcodec": "none", "acodec": "opus", "tbr": 70, "ext": "webm",
        })
        assert fmt.bitrate == 70.0

    def test_content_length_falls_back_to_approx(self):
        fmt = FormatCandidate.from_ytdlp({
            "url": "https://x", "vcodec": "none", "acodec": "opus", "abr": 70,
            "ext": "webm", "filesize_approx": 4096,
        })
        assert fmt.content_length == 4096


class TestAudioCandidates:
    """Test filtering of yt-dlp formats."""

    def test_keeps_only_playable_audio(self, mock_formats):
        ids = [c.format_id for c in audio_candidates(mock_formats)]
        assert ids == ["249", "251", "140"]

    def test_drops_missing_url_bitrate_or_length(self):
        base = {"vcodec": "none", "acodec": "opus", "ext": "webm"}
        formats = [
            dict(base, format_id="no-url", abr=50, filesize=10),
            dict(base, format_id="no-bitrate", url="https://x", filesize=10),
            dict(base, format_id="no-length", url="https://x", abr=50),
            dict(base, format_id="zero-length", url="https://x", abr=50, filesize=0),
            dict(base, format_id="ok", url="https://x", abr=50, filesize=10),
        ]
        assert [c.format_id for c in audio_candidates(formats)] == ["ok"]

    def test_mime_allowlist(self, mock_formats):
        ids = [c.format_id for c in audio_candidates(mock_formats, ["audio/webm"])]
        assert ids == ["249", "251"]

    def test_empty_input(self):
        assert audio_candidates([]) == []
        assert audio_candidates(None) == []


class TestSelectFormats:
    """Test high/low selection."""

    def test_prefers_codec_above_and_below_threshold(self):
        candidates = [candidate(64), candidate(160), candidate(128, codec="aac", container="m4a")]
        result = select_formats(candidates, preferred_codec="opus", threshold=128)
        assert result.high.bitrate == 160 and result.high.codec == "opus"
        assert result.low.bitrate == 64 and result.low.codec == "opus"

    def test_high_falls_back_to_overall_highest(self):
        candidates = [candidate(64), candidate(96), candidate(256, codec="aac")]
        result = select_formats(candidates, preferred_codec="opus", threshold=128)
        assert result.high.bitrate == 256
        assert result.low.bitrate == 64

    def test_low_falls_back_to_overall_lowest(self):
        candidates = [candidate(160), candidate(48, codec="aac")]
        result = select_formats(candidates, preferred_codec="opus", threshold=128)
        assert result.high.bitrate == 160
        assert result.low.bitrate == 48

    def test_no_preferred_codec_uses_extremes(self):
        candidates = [candidate(128, codec="aac"), candidate(48, codec="aac"), candidate(256, codec="aac")]
        result = select_formats(candidates, preferred_codec="opus", threshold=128)
        assert (result.high.bitrate, result.low.bitrate) == (256, 48)

    def test_single_candidate_fills_both_slots(self):
        only = candidate(128)
        result = select_formats([only])
        assert result.high is only
        assert result.low is only

    def test_empty_raises_no_playable_format(self):
        with pytest.raises(NoPlayableFormat) as exc_info:
            select_formats([], video_id="dQw4w9WgXcQ")
        assert exc_info.value.status_code == 404
        assert exc_info.value.video_id == "dQw4w9WgXcQ"

    def test_high_never_below_low(self):
        pools = [
            [candidate(300, codec="aac"), candidate(130), candidate(20, codec="aac")],
            [candidate(100), candidate(200, codec="aac")],
            [candidate(129), candidate(128)],
            [candidate(50, codec="aac"), candidate(60, codec="aac")],
        ]
        for pool in pools:
            result = select_formats(pool, preferred_codec="opus", threshold=128)
            assert result.high.bitrate >= result.low.bitrate

    def test_selection_is_idempotent(self, mock_formats):
        candidates = audio_candidates(mock_formats)
        first = select_formats(candidates)
        second = select_formats(candidates)
        assert first == second

    def test_ties_keep_first_occurrence(self):
        a = candidate(160, url="https://a")
        b = candidate(160, url="https://b")
        result = select_formats([a, b])
        assert result.high.url == "https://a"
