"""
Integration Tests for the SQLite music settings store

Uses the shared in-memory aiosqlite database from conftest.
"""

from unittest.mock import AsyncMock

import aiosqlite
import pytest

from discord_music_board.domain.shared.exceptions import PersistenceError
from discord_music_board.infrastructure.persistence.database import Database
from discord_music_board.infrastructure.persistence.repositories.music_settings_repository import (
    SQLiteMusicSettingsRepository,
)

GUILD = 123456789012345678
CHANNEL = 876543210987654321


class TestMusicSettingsRepository:
    @pytest.mark.asyncio
    async def test_get_unknown_channel_returns_none(self, music_settings_repository):
        assert await music_settings_repository.get(GUILD, CHANNEL) is None
        assert await music_settings_repository.get_last_song_played(GUILD, CHANNEL) is None

    @pytest.mark.asyncio
    async def test_record_song_played_creates_and_increments(self, music_settings_repository):
        await music_settings_repository.record_song_played(GUILD, CHANNEL, "first song")
        await music_settings_repository.record_song_played(GUILD, CHANNEL, "second song")

        setting = await music_settings_repository.get(GUILD, CHANNEL)

        assert setting.last_song_played == "second song"
        assert setting.nb_of_songs_played == 2
        assert setting.volume is None
        assert setting.updated_at is not None
        assert await music_settings_repository.get_last_song_played(GUILD, CHANNEL) == "second song"

    @pytest.mark.asyncio
    async def test_update_volume_only_writes_changes(self, music_settings_repository):
        assert await music_settings_repository.update_volume(GUILD, CHANNEL, 5) is True
        assert await music_settings_repository.update_volume(GUILD, CHANNEL, 5) is False
        assert await music_settings_repository.update_volume(GUILD, CHANNEL, 12) is True

        setting = await music_settings_repository.get(GUILD, CHANNEL)
        assert setting.volume == 12

    @pytest.mark.asyncio
    async def test_volume_and_song_share_a_row(self, music_settings_repository):
        await music_settings_repository.update_volume(GUILD, CHANNEL, 7)
        await music_settings_repository.record_song_played(GUILD, CHANNEL, "song")

        setting = await music_settings_repository.get(GUILD, CHANNEL)

        assert setting.volume == 7
        assert setting.last_song_played == "song"
        assert setting.nb_of_songs_played == 1

    @pytest.mark.asyncio
    async def test_rows_are_per_channel(self, music_settings_repository):
        await music_settings_repository.record_song_played(GUILD, CHANNEL, "here")

        assert await music_settings_repository.get_last_song_played(GUILD, CHANNEL + 1) is None

    @pytest.mark.asyncio
    async def test_database_errors_become_persistence_errors(self):
        database = AsyncMock(spec=Database)
        database.execute.side_effect = aiosqlite.OperationalError("database is locked")
        database.fetch_one.side_effect = aiosqlite.OperationalError("database is locked")
        repository = SQLiteMusicSettingsRepository(database)

        with pytest.raises(PersistenceError) as exc_info:
            await repository.update_volume(GUILD, CHANNEL, 5)
        assert exc_info.value.operation == "update_volume"

        with pytest.raises(PersistenceError):
            await repository.get_last_song_played(GUILD, CHANNEL)


class TestDatabase:
    @pytest.mark.asyncio
    async def test_memory_url_detected(self, in_memory_database):
        assert in_memory_database.is_memory is True
        assert in_memory_database.db_path == ":memory:"

    @pytest.mark.asyncio
    async def test_fetch_all_and_execute(self, in_memory_database):
        changed = await in_memory_database.execute(
            "INSERT INTO music_settings (guild_id, channel_id, volume) VALUES (?, ?, ?)",
            (GUILD, CHANNEL, 3),
        )

        rows = await in_memory_database.fetch_all("SELECT guild_id, volume FROM music_settings")

        assert changed == 1
        assert rows == [{"guild_id": GUILD, "volume": 3}]

    @pytest.mark.asyncio
    async def test_file_database_creates_parent_dir(self, tmp_path):
        db = Database(f"sqlite:///{tmp_path}/nested/board.db")

        await db.initialize()
        try:
            assert (tmp_path / "nested" / "board.db").exists()
        finally:
            await db.close()
