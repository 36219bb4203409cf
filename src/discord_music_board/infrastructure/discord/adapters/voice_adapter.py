"""Discord voice adapter implementing the voice ports with discord.py."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord

from discord_music_board.application.interfaces.voice_adapter import (
    OutputSession,
    VoiceConnection,
    VoiceGateway,
)
from discord_music_board.config.settings import AudioSettings
from discord_music_board.domain.music.value_objects import StreamFormat
from discord_music_board.domain.shared.constants import AudioConstants, TimeConstants
from discord_music_board.domain.shared.exceptions import PlaybackError, VoiceConnectionError
from discord_music_board.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_music_board.domain.music.value_objects import AudioStream

logger = logging.getLogger(__name__)


class DiscordOutputSession(OutputSession):
    """One ``VoiceClient.play`` call.

    discord.py invokes the ``after`` callback on its audio thread; the callback only
    hands the outcome to the event loop, where the completion future is resolved.
    """

    def __init__(
        self,
        voice_client: discord.VoiceClient,
        source: discord.PCMVolumeTransformer,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._voice_client = voice_client
        self._source = source
        self._loop = loop
        self._finished: asyncio.Future[None] = loop.create_future()

    @property
    def source(self) -> discord.PCMVolumeTransformer:
        return self._source

    def after_callback(self, error: Exception | None = None) -> None:
        self._loop.call_soon_threadsafe(self._resolve, error)

    def _resolve(self, error: Exception | None) -> None:
        guild_id = self._voice_client.guild.id if self._voice_client.guild else None
        logger.debug(LogTemplates.OUTPUT_FINISHED, guild_id, error)
        if self._finished.done():
            return
        if error is not None:
            self._finished.set_exception(
                PlaybackError(ErrorMessages.OUTPUT_SESSION_FAILED.format(error=error), cause=error)
            )
        else:
            self._finished.set_result(None)

    async def wait_finished(self) -> None:
        await self._finished

    def end(self) -> None:
        if self._finished.done():
            return
        vc = self._voice_client
        if vc.is_connected() and vc.source is self._source and (vc.is_playing() or vc.is_paused()):
            # stop() makes discord.py run the after callback.
            vc.stop()
        else:
            self._resolve(None)

    def set_volume_logarithmic(self, value: float) -> None:
        gain = max(0.0, value) ** AudioConstants.LOGARITHMIC_EXPONENT
        self._source.volume = min(AudioConstants.MAX_PCM_VOLUME, gain)

    def pause(self) -> None:
        if self._voice_client.is_playing():
            self._voice_client.pause()

    def resume(self) -> None:
        if self._voice_client.is_paused():
            self._voice_client.resume()


class DiscordVoiceConnection(VoiceConnection):
    def __init__(self, voice_client: discord.VoiceClient, settings: AudioSettings | None = None) -> None:
        self._voice_client = voice_client
        self._settings = settings or AudioSettings()

    @property
    def voice_client(self) -> discord.VoiceClient:
        return self._voice_client

    def build_ffmpeg_options(
        self, stream: AudioStream, stream_format: StreamFormat, seek: int | None
    ) -> tuple[str, str]:
        """FFmpeg ``before_options`` and ``options`` for one stream.

        The native profile forwards the provider's HTTP headers, which its stream URLs
        require. Seeking is an input option so FFmpeg skips ahead before decoding.
        """
        before: list[str] = []
        if stream.location.startswith(("http://", "https://")):
            before.append(self._settings.ffmpeg_before_options)
        if stream_format is StreamFormat.OPUS and stream.http_headers:
            headers = "".join(f"{k}: {v}\r\n" for k, v in stream.http_headers.items())
            before.append(AudioConstants.FFMPEG_HEADERS_OPTION.format(headers=headers))
        if seek:
            before.append(AudioConstants.FFMPEG_SEEK_OPTION.format(seconds=seek))
        return " ".join(part for part in before if part), self._settings.ffmpeg_options

    async def play(
        self,
        stream: AudioStream,
        *,
        stream_format: StreamFormat,
        seek: int | None = None,
    ) -> OutputSession:
        before_options, options = self.build_ffmpeg_options(stream, stream_format, seek)
        try:
            source = discord.FFmpegPCMAudio(
                stream.location,
                before_options=before_options,
                options=options,
            )
            volume_source = discord.PCMVolumeTransformer(source)
            session = DiscordOutputSession(
                self._voice_client, volume_source, asyncio.get_running_loop()
            )
            self._voice_client.play(volume_source, after=session.after_callback)
        except discord.ClientException as exc:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, exc)
            raise PlaybackError(ErrorMessages.OUTPUT_SESSION_FAILED.format(error=exc), cause=exc) from exc
        return session

    async def leave(self) -> None:
        guild_id = self._voice_client.guild.id if self._voice_client.guild else None
        try:
            await self._voice_client.disconnect(force=True)
        except (discord.ClientException, discord.HTTPException) as exc:
            channel_id = self._voice_client.channel.id if self._voice_client.channel else None
            raise VoiceConnectionError(channel_id, str(exc)) from exc
        logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)


class DiscordVoiceGateway(VoiceGateway):
    def __init__(
        self,
        bot: discord.Client,
        settings: AudioSettings | None = None,
        connect_timeout: float = TimeConstants.VOICE_CONNECT_TIMEOUT,
    ) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()
        self._connect_timeout = connect_timeout

    async def join(self, guild_id: int, channel_id: int) -> VoiceConnection:
        guild = self._bot.get_guild(guild_id)
        channel = guild.get_channel(channel_id) if guild else None
        if guild is None or not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            raise VoiceConnectionError(channel_id)

        existing = guild.voice_client
        try:
            async with asyncio.timeout(self._connect_timeout):
                if isinstance(existing, discord.VoiceClient) and existing.is_connected():
                    if existing.channel is None or existing.channel.id != channel_id:
                        await existing.move_to(channel)
                    voice_client = existing
                else:
                    voice_client = await channel.connect(self_deaf=True)
        except TimeoutError as exc:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            raise VoiceConnectionError(channel_id) from exc
        except discord.Forbidden as exc:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            raise VoiceConnectionError(channel_id) from exc
        except discord.ClientException as exc:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, exc)
            raise VoiceConnectionError(channel_id, str(exc)) from exc

        logger.info(LogTemplates.VOICE_CONNECTED, channel_id, guild_id)
        return DiscordVoiceConnection(voice_client, self._settings)
