"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the music service, its providers, adapters and
repositories. Components are created on-demand and cached for reuse.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.music.value_objects import ProviderKind
from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.song_provider import SongProvider
    from ..application.interfaces.voice_adapter import VoiceGateway
    from ..application.services.music_service import MusicService
    from ..application.services.song_resolver import SongResolver
    from ..domain.music.repository import MusicSettingsRepository
    from ..infrastructure.persistence.database import Database
    from .settings import Settings

# Providers whose streams cannot be repositioned.
SEEK_BLACKLIST: tuple[ProviderKind, ...] = (ProviderKind.YOUTUBE,)


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Persistence layer
    _database: Database | None = None
    _music_settings_repository: MusicSettingsRepository | None = None

    # Infrastructure adapters
    _providers: tuple[SongProvider, ...] | None = None
    _voice_gateway: VoiceGateway | None = None

    # Application services
    _song_resolver: SongResolver | None = None
    _music_service: MusicService | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Database ===

    @property
    def database(self) -> Database:
        """Get the database connection manager."""
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    # === Repositories ===

    @property
    def music_settings_repository(self) -> MusicSettingsRepository:
        """Get the per-channel music settings repository."""
        if self._music_settings_repository is None:
            from ..infrastructure.persistence.repositories.music_settings_repository import (
                SQLiteMusicSettingsRepository,
            )

            self._music_settings_repository = SQLiteMusicSettingsRepository(self.database)
        return self._music_settings_repository

    # === Infrastructure Adapters ===

    @property
    def providers(self) -> tuple[SongProvider, ...]:
        """Song providers in resolution priority order."""
        if self._providers is None:
            from ..infrastructure.audio.direct_link_provider import DirectLinkProvider
            from ..infrastructure.audio.youtube_provider import YoutubeProvider

            self._providers = (YoutubeProvider(self.settings.audio), DirectLinkProvider())
        return self._providers

    @property
    def voice_gateway(self) -> VoiceGateway:
        """Get the voice gateway."""
        if self._voice_gateway is None:
            from ..infrastructure.discord.adapters.voice_adapter import DiscordVoiceGateway

            self._voice_gateway = DiscordVoiceGateway(self.bot, self.settings.audio)
        return self._voice_gateway

    # === Application Services ===

    @property
    def song_resolver(self) -> SongResolver:
        """Get the song resolver; YouTube search is the fallback for plain text."""
        if self._song_resolver is None:
            from ..application.services.song_resolver import SongResolver

            providers = self.providers
            fallback = next(p for p in providers if p.kind is ProviderKind.YOUTUBE)
            self._song_resolver = SongResolver(providers, fallback)
        return self._song_resolver

    @property
    def music_service(self) -> MusicService:
        """Get the Music Board engine."""
        if self._music_service is None:
            from ..application.services.music_service import MusicService

            music = self.settings.music
            self._music_service = MusicService(
                resolver=self.song_resolver,
                voice_gateway=self.voice_gateway,
                settings_repository=self.music_settings_repository,
                disconnect_timeout_s=music.disconnect_timeout_s,
                alone_disconnect_timeout_s=music.alone_disconnect_timeout_s,
                default_volume=music.default_volume,
                max_volume=music.max_volume,
                seek_blacklist=SEEK_BLACKLIST,
            )
        return self._music_service

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize all async resources."""
        await self.database.initialize()

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources."""
        if self._music_service is not None:
            await self._music_service.shutdown()

        if self._database is not None:
            await self._database.close()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
