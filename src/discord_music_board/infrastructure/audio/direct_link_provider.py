"""SongProvider for plain HTTP(S) links to audio files."""

from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING, ClassVar, Final
from urllib.parse import unquote, urlparse

from discord_music_board.application.interfaces.song_provider import SongProvider
from discord_music_board.domain.music.entities import LinkableSong
from discord_music_board.domain.music.value_objects import AudioStream, ProviderKind

if TYPE_CHECKING:
    from discord_music_board.application.services.music_models import MusicContext

AUDIO_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {".mp3", ".ogg", ".opus", ".m4a", ".wav", ".flac", ".webm"}
)


class DirectLinkProvider(SongProvider):
    """Streams an audio file URL as-is. It cannot search, so non-URLs never match."""

    kind: ClassVar[ProviderKind] = ProviderKind.DIRECT_LINK

    def is_query_provider_url(self, query: str) -> bool:
        parsed = urlparse(query.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            return False
        _, ext = posixpath.splitext(parsed.path)
        return ext.lower() in AUDIO_EXTENSIONS

    async def get_linkable_song(
        self, query: str, is_native_url: bool, context: MusicContext | None = None
    ) -> LinkableSong | None:
        query = query.strip()
        if not is_native_url and not self.is_query_provider_url(query):
            return None

        return LinkableSong(
            query=query,
            title=self._title_from_url(query),
            url=query,
            provider=self.kind,
            stream_factory=self._get_stream,
        )

    @staticmethod
    def _title_from_url(url: str) -> str:
        name = posixpath.basename(unquote(urlparse(url).path))
        return name or url

    @staticmethod
    async def _get_stream(song: LinkableSong) -> AudioStream:
        return AudioStream(location=song.url)
