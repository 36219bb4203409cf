"""SongProvider implementation using yt-dlp for YouTube URLs and search."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import TYPE_CHECKING, Any, ClassVar, Final, cast

from yt_dlp import YoutubeDL
from yt_dlp.utils import DownloadError, ExtractorError

from discord_music_board.application.interfaces.song_provider import SongProvider
from discord_music_board.config.settings import AudioSettings
from discord_music_board.domain.music.entities import LinkableSong
from discord_music_board.domain.music.value_objects import AudioStream, ProviderKind
from discord_music_board.domain.shared.constants import LimitConstants
from discord_music_board.domain.shared.exceptions import ResolutionError
from discord_music_board.domain.shared.messages import ErrorMessages, LogTemplates
from discord_music_board.infrastructure.audio.models import (
    LOG_QUERY_TRUNCATE,
    CacheEntry,
    YtDlpOpts,
    YtDlpTrackInfo,
)

if TYPE_CHECKING:
    from discord_music_board.application.services.music_models import MusicContext

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH: Final[int] = 500

YOUTUBE_URL_PATTERNS: Final[list[re.Pattern[str]]] = [
    re.compile(r"^https?://(?:www\.|m\.)?youtube\.com/watch\?(?:.*&)?v=[\w-]{11}", re.IGNORECASE),
    re.compile(r"^https?://music\.youtube\.com/watch\?(?:.*&)?v=[\w-]{11}", re.IGNORECASE),
    re.compile(r"^https?://(?:www\.|m\.)?youtube\.com/shorts/[\w-]{11}", re.IGNORECASE),
    re.compile(r"^https?://youtu\.be/[\w-]{11}", re.IGNORECASE),
]


class YoutubeProvider(SongProvider):
    """Resolves YouTube links directly and anything else through a YouTube search.

    yt-dlp is blocking, so every extraction runs in a worker thread. Results are cached
    per page URL for ``ytdlp_cache_ttl_s`` seconds; a cached entry also serves the
    stream URL when the song is (re)played within that window.
    """

    kind: ClassVar[ProviderKind] = ProviderKind.YOUTUBE

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._opts = YtDlpOpts(format=self._settings.ytdlp_format)
        self._cache_ttl = self._settings.ytdlp_cache_ttl_s
        self._cache: dict[str, CacheEntry] = {}

    def is_query_provider_url(self, query: str) -> bool:
        query = query.strip()
        return any(pattern.match(query) for pattern in YOUTUBE_URL_PATTERNS)

    async def get_linkable_song(
        self, query: str, is_native_url: bool, context: MusicContext | None = None
    ) -> LinkableSong | None:
        query = query.strip()
        if not query:
            return None

        if is_native_url:
            info = await asyncio.to_thread(self._extract_info_sync, query)
        else:
            info = await asyncio.to_thread(self._search_sync, query)

        if info is None or info.page_url is None:
            return None

        return LinkableSong(
            query=query,
            title=info.title[:TITLE_MAX_LENGTH],
            url=info.page_url,
            provider=self.kind,
            stream_factory=self._get_stream,
        )

    async def _get_stream(self, song: LinkableSong) -> AudioStream:
        info = await asyncio.to_thread(self._extract_info_sync, song.url)
        audio = info.best_audio() if info is not None else None
        if audio is None:
            raise ResolutionError(
                str(self.kind), ErrorMessages.YOUTUBE_NO_STREAM.format(title=song.title)
            )
        location, headers = audio
        return AudioStream(location=location, http_headers=headers)

    # ── Blocking yt-dlp calls (run in a thread) ────────────────────────

    def _run_ytdlp(self, target: str) -> dict[str, Any] | None:
        try:
            with YoutubeDL(params=cast(Any, self._opts.model_dump(exclude_none=True))) as ydl:
                data = ydl.extract_info(target, download=False)
        except (DownloadError, ExtractorError) as exc:
            logger.warning(LogTemplates.YTDLP_EXTRACT_FAILED, target[:LOG_QUERY_TRUNCATE])
            raise ResolutionError(
                str(self.kind), ErrorMessages.YOUTUBE_LOOKUP_FAILED.format(error=exc)
            ) from exc
        return dict(data) if isinstance(data, dict) else None

    def _extract_info_sync(self, url: str) -> YtDlpTrackInfo | None:
        now = time.time()
        cached = self._cache.get(url)
        if cached is not None:
            if now - cached.cached_at < self._cache_ttl:
                logger.debug(LogTemplates.YTDLP_CACHE_HIT, url[:LOG_QUERY_TRUNCATE])
                return cached.info
            self._cache.pop(url, None)

        data = self._run_ytdlp(url)
        info = YtDlpTrackInfo.model_validate(data) if data is not None else None
        self._store(url, info, now)
        return info

    def _search_sync(self, query: str) -> YtDlpTrackInfo | None:
        data = self._run_ytdlp(f"ytsearch1:{query}")
        if data is None:
            return None

        entries = data.get("entries") or []
        if not isinstance(entries, list):
            return None
        first = next((e for e in entries if isinstance(e, dict)), None)
        if first is None:
            return None

        info = YtDlpTrackInfo.model_validate(first)
        if info.page_url is not None:
            self._store(info.page_url, info, time.time())
        return info

    def _store(self, key: str, info: YtDlpTrackInfo | None, now: float) -> None:
        self._cache[key] = CacheEntry(info=info, cached_at=now)
        if len(self._cache) <= LimitConstants.YTDLP_CACHE_MAX_SIZE:
            return

        expired = [k for k, entry in self._cache.items() if now - entry.cached_at >= self._cache_ttl]
        for k in expired:
            self._cache.pop(k, None)
        if expired:
            logger.debug(LogTemplates.YTDLP_CACHE_PRUNED, len(expired))
