import asyncio

import pytest
import pytest_asyncio

from discord_music_board.application.interfaces.song_provider import SongProvider
from discord_music_board.application.interfaces.voice_adapter import (
    OutputSession,
    VoiceConnection,
    VoiceGateway,
)
from discord_music_board.application.services.music_models import MusicContext
from discord_music_board.domain.music.entities import LinkableSong
from discord_music_board.domain.music.repository import MusicSetting, MusicSettingsRepository
from discord_music_board.domain.music.value_objects import AudioStream, ProviderKind
from discord_music_board.domain.shared.exceptions import PersistenceError, PlaybackError

GUILD_ID = 111111111111111111
VOICE_CHANNEL_ID = 222222222222222222
TEXT_CHANNEL_ID = 333333333333333333
USER_ID = 444444444444444444


# ============================================================================
# Fakes for the engine's ports
# ============================================================================


class FakeOutputSession(OutputSession):
    """Output session whose end of song is driven by the test."""

    def __init__(self, stream: AudioStream, seek: int | None) -> None:
        self.stream = stream
        self.seek = seek
        self.volumes: list[float] = []
        self.paused = False
        self.ended = False
        self._finished: asyncio.Future[None] = asyncio.get_running_loop().create_future()

    @property
    def done(self) -> bool:
        return self._finished.done()

    def finish(self) -> None:
        if not self._finished.done():
            self._finished.set_result(None)

    def fail(self, message: str = "decoder crashed") -> None:
        if not self._finished.done():
            self._finished.set_exception(PlaybackError(message))

    async def wait_finished(self) -> None:
        await self._finished

    def end(self) -> None:
        self.ended = True
        self.finish()

    def set_volume_logarithmic(self, value: float) -> None:
        self.volumes.append(value)

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False


class FakeVoiceConnection(VoiceConnection):
    def __init__(self, channel_id: int) -> None:
        self.channel_id = channel_id
        self.sessions: list[FakeOutputSession] = []
        self.leave_count = 0

    @property
    def current(self) -> FakeOutputSession:
        return self.sessions[-1]

    @property
    def left(self) -> bool:
        return self.leave_count > 0

    async def play(self, stream, *, stream_format, seek=None) -> OutputSession:
        session = FakeOutputSession(stream, seek)
        self.sessions.append(session)
        return session

    async def leave(self) -> None:
        self.leave_count += 1


class FakeVoiceGateway(VoiceGateway):
    def __init__(self) -> None:
        self.joins: list[tuple[int, int]] = []
        self.connections: list[FakeVoiceConnection] = []
        self.error: Exception | None = None

    @property
    def connection(self) -> FakeVoiceConnection:
        return self.connections[-1]

    async def join(self, guild_id: int, channel_id: int) -> VoiceConnection:
        self.joins.append((guild_id, channel_id))
        if self.error is not None:
            raise self.error
        connection = FakeVoiceConnection(channel_id)
        self.connections.append(connection)
        return connection


class FakeProvider(SongProvider):
    """Resolves any query to a song titled after it and records every stream it opens."""

    def __init__(self, kind: ProviderKind = ProviderKind.DIRECT_LINK, url_prefix: str | None = None) -> None:
        self.kind = kind
        self.url_prefix = url_prefix
        self.calls: list[tuple[str, bool]] = []
        self.streamed: list[str] = []
        self.missing: set[str] = set()
        self.error: Exception | None = None

    def is_query_provider_url(self, query: str) -> bool:
        return self.url_prefix is not None and query.startswith(self.url_prefix)

    async def get_linkable_song(self, query, is_native_url, context=None):
        self.calls.append((query, is_native_url))
        if self.error is not None:
            raise self.error
        if query in self.missing:
            return None
        return LinkableSong(
            query=query,
            title=query,
            url=f"https://songs.example.com/{query.replace(' ', '-')}.ogg",
            provider=self.kind,
            stream_factory=self._stream,
        )

    async def _stream(self, song: LinkableSong) -> AudioStream:
        self.streamed.append(song.title)
        return AudioStream(location=song.url)


class FakeTextChannel:
    def __init__(self, channel_id: int = TEXT_CHANNEL_ID) -> None:
        self.id = channel_id
        self.sent: list[str] = []

    async def send(self, content: str) -> None:
        self.sent.append(content)


class FakeSettingsRepository(MusicSettingsRepository):
    def __init__(self) -> None:
        self.songs: list[tuple[int, int, str]] = []
        self.volumes: list[tuple[int, int, int]] = []
        self.last_played: dict[tuple[int, int], str] = {}
        self.fail = False

    def _check(self, operation: str) -> None:
        if self.fail:
            raise PersistenceError(operation, "database is locked")

    async def get(self, guild_id, channel_id):
        self._check("get")
        return MusicSetting(
            guild_id=guild_id,
            channel_id=channel_id,
            last_song_played=self.last_played.get((guild_id, channel_id)),
        )

    async def record_song_played(self, guild_id, channel_id, query):
        self._check("record_song_played")
        self.songs.append((guild_id, channel_id, query))
        self.last_played[(guild_id, channel_id)] = query

    async def update_volume(self, guild_id, channel_id, volume):
        self._check("update_volume")
        self.volumes.append((guild_id, channel_id, volume))
        return True

    async def get_last_song_played(self, guild_id, channel_id):
        self._check("get_last_song_played")
        return self.last_played.get((guild_id, channel_id))


# ============================================================================
# Engine Fixtures
# ============================================================================


@pytest.fixture
def settle():
    """Let the board drivers and background tasks run until they block again."""

    async def _settle(rounds: int = 20) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)

    return _settle


@pytest.fixture
def text_channel():
    return FakeTextChannel()


@pytest.fixture
def make_context(text_channel):
    def _make(voice_channel_id: int | None = VOICE_CHANNEL_ID, guild_id: int = GUILD_ID) -> MusicContext:
        return MusicContext(
            guild_id=guild_id,
            text_channel=text_channel,
            user_id=USER_ID,
            user_name="listener",
            voice_channel_id=voice_channel_id,
        )

    return _make


@pytest.fixture
def context(make_context):
    return make_context()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def voice_gateway():
    return FakeVoiceGateway()


@pytest.fixture
def settings_repo():
    return FakeSettingsRepository()


@pytest_asyncio.fixture
async def music_service(provider, voice_gateway, settings_repo):
    from discord_music_board.application.services.music_service import MusicService
    from discord_music_board.application.services.song_resolver import SongResolver

    service = MusicService(
        resolver=SongResolver((provider,), provider),
        voice_gateway=voice_gateway,
        settings_repository=settings_repo,
        disconnect_timeout_s=0.05,
        alone_disconnect_timeout_s=0.05,
        default_volume=5,
        max_volume=30,
        seek_blacklist=(ProviderKind.YOUTUBE,),
    )
    yield service
    await service.shutdown()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from discord_music_board.infrastructure.persistence.database import Database

    db = Database("sqlite:///:memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def music_settings_repository(in_memory_database):
    from discord_music_board.infrastructure.persistence.repositories.music_settings_repository import (
        SQLiteMusicSettingsRepository,
    )

    return SQLiteMusicSettingsRepository(in_memory_database)
