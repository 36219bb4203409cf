"""
Music Domain Repository Interfaces

Abstract base classes defining the contracts for data persistence.
Implementations live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict

from discord_music_board.domain.shared.types import (
    DiscordSnowflake,
    NonNegativeInt,
    UtcDatetimeField,
    VolumeLevel,
)


class MusicSetting(BaseModel):
    """Persisted music settings of one guild text channel."""

    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    channel_id: DiscordSnowflake
    volume: VolumeLevel | None = None
    last_song_played: str | None = None
    nb_of_songs_played: NonNegativeInt = 0
    updated_at: UtcDatetimeField | None = None


class MusicSettingsRepository(ABC):
    """Settings sink for per-channel music settings.

    Writes are best-effort from the engine's point of view: implementations raise
    ``PersistenceError`` and the caller logs and swallows it.
    """

    @abstractmethod
    async def get(self, guild_id: int, channel_id: int) -> MusicSetting | None:
        """Retrieve the settings of a guild text channel, if any were stored."""
        ...

    @abstractmethod
    async def record_song_played(self, guild_id: int, channel_id: int, query: str) -> None:
        """Store ``query`` as the last song played and increment the play counter."""
        ...

    @abstractmethod
    async def update_volume(self, guild_id: int, channel_id: int, volume: int) -> bool:
        """Store ``volume`` unless it is already the stored value.

        Returns:
            True if a row was written, False if the stored volume was unchanged.
        """
        ...

    @abstractmethod
    async def get_last_song_played(self, guild_id: int, channel_id: int) -> str | None:
        """Return the query of the last song played in a guild text channel."""
        ...
