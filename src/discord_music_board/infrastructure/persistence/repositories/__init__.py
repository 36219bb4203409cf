"""SQLite repository implementations."""

from discord_music_board.infrastructure.persistence.repositories.music_settings_repository import (
    SQLiteMusicSettingsRepository,
)

__all__ = [
    "SQLiteMusicSettingsRepository",
]
