"""Song resolution across the registered providers."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.music.entities import LinkableSong
    from ...domain.music.value_objects import ProviderKind
    from ..interfaces.song_provider import SongProvider
    from .music_models import MusicContext

logger = logging.getLogger(__name__)


class SongResolver:
    """Resolves a query through providers listed in a fixed priority order.

    The first provider whose native URL form matches wins; otherwise the fallback
    provider treats the query as a search term. ``ResolutionError`` raised by a
    provider propagates unchanged, distinct from the ``None`` no-match result.
    """

    def __init__(self, providers: Sequence[SongProvider], fallback: SongProvider) -> None:
        self._providers: tuple[SongProvider, ...] = tuple(providers)
        self._fallback = fallback

    @property
    def providers(self) -> tuple[SongProvider, ...]:
        return self._providers

    @property
    def fallback(self) -> SongProvider:
        return self._fallback

    def find_provider(self, kind: ProviderKind) -> SongProvider | None:
        return next((p for p in self._providers if p.kind is kind), None)

    async def resolve(
        self,
        query: str,
        context: MusicContext | None = None,
        *,
        force_provider: ProviderKind | None = None,
    ) -> LinkableSong | None:
        if force_provider is not None:
            forced = self.find_provider(force_provider)
            if forced is None:
                logger.warning(LogTemplates.PROVIDER_FORCED_MISSING, force_provider)
                return None
            return await self._resolve_with(forced, query, forced.is_query_provider_url(query), context)

        provider = next((p for p in self._providers if p.is_query_provider_url(query)), None)
        if provider is not None:
            return await self._resolve_with(provider, query, True, context)

        return await self._resolve_with(self._fallback, query, False, context)

    async def _resolve_with(
        self,
        provider: SongProvider,
        query: str,
        is_native_url: bool,
        context: MusicContext | None,
    ) -> LinkableSong | None:
        logger.debug(LogTemplates.PROVIDER_SELECTED, query, provider.kind, is_native_url)
        song = await provider.get_linkable_song(query, is_native_url, context)
        if song is None:
            logger.info(LogTemplates.PROVIDER_NO_MATCH, provider.kind, query)
        return song
