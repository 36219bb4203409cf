"""
Tests for the discord.py voice adapter

Covers the output session completion future, FFmpeg option building, play/leave
error mapping and the voice gateway join paths.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import discord
import pytest
import pytest_asyncio

from discord_music_board.config.settings import AudioSettings
from discord_music_board.domain.music.value_objects import AudioStream, StreamFormat
from discord_music_board.domain.shared.exceptions import PlaybackError, VoiceConnectionError
from discord_music_board.infrastructure.discord.adapters.voice_adapter import (
    DiscordOutputSession,
    DiscordVoiceConnection,
    DiscordVoiceGateway,
)

GUILD_ID = 123
CHANNEL_ID = 456


@pytest.fixture
def voice_client():
    vc = MagicMock(spec=discord.VoiceClient)
    vc.guild = MagicMock(id=GUILD_ID)
    vc.channel = MagicMock(id=CHANNEL_ID)
    vc.is_connected.return_value = True
    vc.is_playing.return_value = True
    vc.is_paused.return_value = False
    vc.disconnect = AsyncMock()
    return vc


@pytest_asyncio.fixture
async def session(voice_client):
    source = MagicMock(spec=discord.PCMVolumeTransformer)
    voice_client.source = source
    return DiscordOutputSession(voice_client, source, asyncio.get_running_loop())


# =============================================================================
# DiscordOutputSession
# =============================================================================


class TestOutputSession:
    @pytest.mark.asyncio
    async def test_after_callback_finishes_session(self, session):
        session.after_callback(None)

        await asyncio.wait_for(session.wait_finished(), timeout=1)

    @pytest.mark.asyncio
    async def test_after_callback_error_raises_playback_error(self, session):
        session.after_callback(RuntimeError("ffmpeg died"))

        with pytest.raises(PlaybackError) as exc_info:
            await asyncio.wait_for(session.wait_finished(), timeout=1)

        assert "ffmpeg died" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_after_callback_from_audio_thread(self, session):
        await asyncio.to_thread(session.after_callback, None)

        await asyncio.wait_for(session.wait_finished(), timeout=1)

    @pytest.mark.asyncio
    async def test_end_stops_active_playback(self, session, voice_client):
        session.end()

        voice_client.stop.assert_called_once()

    @pytest.mark.asyncio
    async def test_end_when_not_playing_finishes_directly(self, session, voice_client):
        voice_client.is_playing.return_value = False

        session.end()

        voice_client.stop.assert_not_called()
        await asyncio.wait_for(session.wait_finished(), timeout=1)

    @pytest.mark.asyncio
    async def test_end_ignores_other_source(self, session, voice_client):
        voice_client.source = MagicMock()

        session.end()

        voice_client.stop.assert_not_called()

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(1.0, 1.0), (0.0, 0.0), (-1.0, 0.0), (5 / 15, (5 / 15) ** 1.660964), (10.0, 2.0)],
    )
    @pytest.mark.asyncio
    async def test_volume_curve(self, session, value, expected):
        session.set_volume_logarithmic(value)

        assert session.source.volume == pytest.approx(expected)

    @pytest.mark.asyncio
    async def test_pause_and_resume(self, session, voice_client):
        session.pause()
        voice_client.pause.assert_called_once()

        voice_client.is_paused.return_value = True
        session.resume()
        voice_client.resume.assert_called_once()


# =============================================================================
# DiscordVoiceConnection
# =============================================================================


class TestFfmpegOptions:
    @pytest.fixture
    def connection(self, voice_client):
        return DiscordVoiceConnection(voice_client, AudioSettings())

    def test_http_stream_reconnects(self, connection):
        before, options = connection.build_ffmpeg_options(
            AudioStream(location="https://cdn.example.com/a.mp3"), StreamFormat.OGG_OPUS, None
        )

        assert before == AudioSettings().ffmpeg_before_options
        assert options == "-vn"

    def test_local_file_has_no_input_options(self, connection):
        before, _ = connection.build_ffmpeg_options(
            AudioStream(location="/music/a.mp3"), StreamFormat.OGG_OPUS, None
        )

        assert before == ""

    def test_native_profile_forwards_headers(self, connection):
        stream = AudioStream(location="https://rr1.googlevideo.com/x", http_headers={"User-Agent": "UA"})

        before, _ = connection.build_ffmpeg_options(stream, StreamFormat.OPUS, None)

        assert '-headers "User-Agent: UA\r\n"' in before

    def test_generic_profile_drops_headers(self, connection):
        stream = AudioStream(location="https://cdn.example.com/a.ogg", http_headers={"User-Agent": "UA"})

        before, _ = connection.build_ffmpeg_options(stream, StreamFormat.OGG_OPUS, None)

        assert "-headers" not in before

    def test_seek_is_input_option(self, connection):
        before, _ = connection.build_ffmpeg_options(
            AudioStream(location="https://cdn.example.com/a.mp3"), StreamFormat.OGG_OPUS, 90
        )

        assert before.endswith("-ss 90")


class TestVoiceConnection:
    @pytest.mark.asyncio
    async def test_play_wraps_source_and_registers_callback(self, voice_client):
        connection = DiscordVoiceConnection(voice_client)

        with (
            patch("discord.FFmpegPCMAudio") as ffmpeg,
            patch("discord.PCMVolumeTransformer") as transformer,
        ):
            session = await connection.play(
                AudioStream(location="https://cdn.example.com/a.mp3"),
                stream_format=StreamFormat.OGG_OPUS,
                seek=30,
            )

        assert isinstance(session, DiscordOutputSession)
        assert "-ss 30" in ffmpeg.call_args.kwargs["before_options"]
        transformer.assert_called_once_with(ffmpeg.return_value)
        voice_client.play.assert_called_once_with(transformer.return_value, after=session.after_callback)

    @pytest.mark.asyncio
    async def test_play_client_error_becomes_playback_error(self, voice_client):
        voice_client.play.side_effect = discord.ClientException("Not connected to voice.")
        connection = DiscordVoiceConnection(voice_client)

        with patch("discord.FFmpegPCMAudio"), patch("discord.PCMVolumeTransformer"):
            with pytest.raises(PlaybackError):
                await connection.play(
                    AudioStream(location="https://cdn.example.com/a.mp3"),
                    stream_format=StreamFormat.OGG_OPUS,
                )

    @pytest.mark.asyncio
    async def test_leave_disconnects(self, voice_client):
        await DiscordVoiceConnection(voice_client).leave()

        voice_client.disconnect.assert_awaited_once_with(force=True)

    @pytest.mark.asyncio
    async def test_leave_error_becomes_voice_connection_error(self, voice_client):
        voice_client.disconnect.side_effect = discord.ClientException("boom")

        with pytest.raises(VoiceConnectionError):
            await DiscordVoiceConnection(voice_client).leave()


# =============================================================================
# DiscordVoiceGateway
# =============================================================================


class TestVoiceGateway:
    @pytest.fixture
    def channel(self, voice_client):
        channel = MagicMock(spec=discord.VoiceChannel)
        channel.id = CHANNEL_ID
        channel.connect = AsyncMock(return_value=voice_client)
        return channel

    @pytest.fixture
    def guild(self, channel):
        guild = MagicMock()
        guild.id = GUILD_ID
        guild.voice_client = None
        guild.get_channel.return_value = channel
        return guild

    @pytest.fixture
    def bot(self, guild):
        bot = MagicMock()
        bot.get_guild.return_value = guild
        return bot

    @pytest.mark.asyncio
    async def test_join_connects_deafened(self, bot, channel, voice_client):
        connection = await DiscordVoiceGateway(bot).join(GUILD_ID, CHANNEL_ID)

        channel.connect.assert_awaited_once_with(self_deaf=True)
        assert connection.voice_client is voice_client

    @pytest.mark.asyncio
    async def test_join_unknown_guild(self, bot):
        bot.get_guild.return_value = None

        with pytest.raises(VoiceConnectionError):
            await DiscordVoiceGateway(bot).join(GUILD_ID, CHANNEL_ID)

    @pytest.mark.asyncio
    async def test_join_non_voice_channel(self, bot, guild):
        guild.get_channel.return_value = MagicMock(spec=discord.TextChannel)

        with pytest.raises(VoiceConnectionError):
            await DiscordVoiceGateway(bot).join(GUILD_ID, CHANNEL_ID)

    @pytest.mark.asyncio
    async def test_join_reuses_connected_client(self, bot, guild, channel, voice_client):
        voice_client.channel = MagicMock(id=999)
        guild.voice_client = voice_client
        voice_client.move_to = AsyncMock()

        connection = await DiscordVoiceGateway(bot).join(GUILD_ID, CHANNEL_ID)

        voice_client.move_to.assert_awaited_once_with(channel)
        channel.connect.assert_not_called()
        assert connection.voice_client is voice_client

    @pytest.mark.asyncio
    async def test_join_timeout(self, bot, channel):
        async def never_connects(**_):
            await asyncio.sleep(10)

        channel.connect = AsyncMock(side_effect=never_connects)

        with pytest.raises(VoiceConnectionError):
            await DiscordVoiceGateway(bot, connect_timeout=0.01).join(GUILD_ID, CHANNEL_ID)

    @pytest.mark.asyncio
    async def test_join_forbidden(self, bot, channel):
        channel.connect.side_effect = discord.Forbidden(MagicMock(), "No permission")

        with pytest.raises(VoiceConnectionError):
            await DiscordVoiceGateway(bot).join(GUILD_ID, CHANNEL_ID)

    @pytest.mark.asyncio
    async def test_join_client_error(self, bot, channel):
        channel.connect.side_effect = discord.ClientException("Already connected")

        with pytest.raises(VoiceConnectionError):
            await DiscordVoiceGateway(bot).join(GUILD_ID, CHANNEL_ID)
