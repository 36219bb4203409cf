"""Voice occupancy listener that drives the music board's alone timer."""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_music_board.domain.shared.messages import ErrorMessages

if TYPE_CHECKING:
    from ....config.container import Container


class VoiceEventCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @commands.Cog.listener()
    async def on_voice_state_update(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        if member.bot:
            return

        guild = member.guild
        bot_channel = self._get_bot_voice_channel(guild)
        if bot_channel is None:
            return

        was_in = before.channel is not None and before.channel.id == bot_channel.id
        is_in = after.channel is not None and after.channel.id == bot_channel.id

        if was_in and not is_in:
            self._on_listener_left(guild.id, bot_channel)
        elif is_in and not was_in:
            self._on_listener_joined(guild.id)

    def _on_listener_left(
        self, guild_id: int, bot_channel: discord.VoiceChannel | discord.StageChannel
    ) -> None:
        if self._has_non_bot_members(bot_channel):
            return

        music_service = self.container.music_service
        if music_service.has_pending_disconnect(guild_id):
            return

        music_service.start_alone_timeout(guild_id)

    def _on_listener_joined(self, guild_id: int) -> None:
        # Only an alone timer is stopped; a pending idle timer keeps running.
        self.container.music_service.stop_alone_timeout(guild_id)

    def _get_bot_voice_channel(
        self, guild: discord.Guild
    ) -> discord.VoiceChannel | discord.StageChannel | None:
        voice_client = discord.utils.get(self.bot.voice_clients, guild=guild)
        if voice_client is None or voice_client.channel is None:
            return None

        channel = voice_client.channel
        if isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            return channel
        return None

    @staticmethod
    def _has_non_bot_members(channel: discord.VoiceChannel | discord.StageChannel) -> bool:
        return any(not m.bot for m in channel.members)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(VoiceEventCog(bot, container))
