"""Audio infrastructure - song providers backed by yt-dlp and direct links."""

from discord_music_board.infrastructure.audio.direct_link_provider import DirectLinkProvider
from discord_music_board.infrastructure.audio.models import (
    AudioFormatInfo,
    CacheEntry,
    YtDlpOpts,
    YtDlpTrackInfo,
)
from discord_music_board.infrastructure.audio.youtube_provider import YoutubeProvider

__all__ = [
    "AudioFormatInfo",
    "CacheEntry",
    "DirectLinkProvider",
    "YoutubeProvider",
    "YtDlpOpts",
    "YtDlpTrackInfo",
]
