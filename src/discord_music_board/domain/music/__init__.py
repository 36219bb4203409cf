"""
Music Bounded Context

Per-guild playback state, resolved songs, and the settings-store contract.
"""

from discord_music_board.domain.music.entities import LinkableSong, MusicBoard
from discord_music_board.domain.music.registry import MusicBoardRegistry
from discord_music_board.domain.music.repository import MusicSetting, MusicSettingsRepository
from discord_music_board.domain.music.value_objects import (
    AudioStream,
    DisconnectReason,
    LoopMode,
    PlaySongOptions,
    ProviderKind,
    StreamFormat,
)

__all__ = [
    # Entities
    "LinkableSong",
    "MusicBoard",
    "MusicBoardRegistry",
    # Value Objects
    "AudioStream",
    "DisconnectReason",
    "LoopMode",
    "PlaySongOptions",
    "ProviderKind",
    "StreamFormat",
    # Repository
    "MusicSetting",
    "MusicSettingsRepository",
]
