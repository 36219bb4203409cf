"""SQLite implementation of the music settings repository."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import aiosqlite

from discord_music_board.domain.music.repository import MusicSetting, MusicSettingsRepository
from discord_music_board.domain.shared.constants import DatabaseTables
from discord_music_board.domain.shared.datetime_utils import UtcDateTime
from discord_music_board.domain.shared.exceptions import PersistenceError
from discord_music_board.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)

_TABLE = DatabaseTables.MUSIC_SETTINGS


class SQLiteMusicSettingsRepository(MusicSettingsRepository):
    """Stores one row per (guild, text channel), created on first write."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def get(self, guild_id: int, channel_id: int) -> MusicSetting | None:
        row = await self._fetch_one(
            "get",
            f"""
            SELECT guild_id, channel_id, volume, last_song_played, nb_of_songs_played, updated_at
            FROM {_TABLE}
            WHERE guild_id = ? AND channel_id = ?
            """,
            (guild_id, channel_id),
        )
        if row is None:
            return None
        return self._row_to_setting(row)

    async def record_song_played(self, guild_id: int, channel_id: int, query: str) -> None:
        now = UtcDateTime.now().iso
        await self._execute(
            "record_song_played",
            f"""
            INSERT INTO {_TABLE} (guild_id, channel_id, last_song_played, nb_of_songs_played, updated_at)
            VALUES (?, ?, ?, 1, ?)
            ON CONFLICT(guild_id, channel_id) DO UPDATE SET
                last_song_played = excluded.last_song_played,
                nb_of_songs_played = nb_of_songs_played + 1,
                updated_at = excluded.updated_at
            """,
            (guild_id, channel_id, query, now),
        )
        logger.debug(LogTemplates.SETTINGS_SONG_RECORDED, query, guild_id, channel_id)

    async def update_volume(self, guild_id: int, channel_id: int, volume: int) -> bool:
        now = UtcDateTime.now().iso
        changed = await self._execute(
            "update_volume",
            f"""
            INSERT INTO {_TABLE} (guild_id, channel_id, volume, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(guild_id, channel_id) DO UPDATE SET
                volume = excluded.volume,
                updated_at = excluded.updated_at
            WHERE volume IS NOT excluded.volume
            """,
            (guild_id, channel_id, volume, now),
        )
        if changed:
            logger.debug(LogTemplates.SETTINGS_VOLUME_PERSISTED, volume, guild_id, channel_id)
            return True

        logger.debug(LogTemplates.SETTINGS_VOLUME_UNCHANGED, volume, guild_id, channel_id)
        return False

    async def get_last_song_played(self, guild_id: int, channel_id: int) -> str | None:
        row = await self._fetch_one(
            "get_last_song_played",
            f"SELECT last_song_played FROM {_TABLE} WHERE guild_id = ? AND channel_id = ?",
            (guild_id, channel_id),
        )
        return row["last_song_played"] if row else None

    async def _execute(self, operation: str, sql: str, parameters: tuple[Any, ...]) -> int:
        try:
            return await self._db.execute(sql, parameters)
        except aiosqlite.Error as exc:
            raise PersistenceError(operation, str(exc)) from exc

    async def _fetch_one(
        self, operation: str, sql: str, parameters: tuple[Any, ...]
    ) -> dict[str, Any] | None:
        try:
            return await self._db.fetch_one(sql, parameters)
        except aiosqlite.Error as exc:
            raise PersistenceError(operation, str(exc)) from exc

    @staticmethod
    def _row_to_setting(row: dict[str, Any]) -> MusicSetting:
        updated_at = row.get("updated_at")
        return MusicSetting(
            guild_id=row["guild_id"],
            channel_id=row["channel_id"],
            volume=row["volume"],
            last_song_played=row["last_song_played"],
            nb_of_songs_played=row["nb_of_songs_played"],
            updated_at=UtcDateTime.from_iso(updated_at).dt if updated_at else None,
        )
