"""Slash-command music cog delegating to the Music Board engine."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from discord_music_board.application.services.music_models import MusicContext
from discord_music_board.domain.music.value_objects import ProviderKind
from discord_music_board.domain.shared.exceptions import DomainError, UserInputError
from discord_music_board.domain.shared.messages import DiscordUIMessages, ErrorMessages
from discord_music_board.infrastructure.discord.views.music_controls_view import MusicControlsView

if TYPE_CHECKING:
    from ....application.services.music_service import MusicService
    from ....config.container import Container

logger = logging.getLogger(__name__)

MusicAction = Callable[[MusicContext], Awaitable[str | None]]


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @property
    def music(self) -> MusicService:
        return self.container.music_service

    async def _send(
        self,
        interaction: discord.Interaction,
        message: str,
        *,
        ephemeral: bool = False,
        view: MusicControlsView | None = None,
    ) -> None:
        if view is None:
            if interaction.response.is_done():
                await interaction.followup.send(message, ephemeral=ephemeral)
            else:
                await interaction.response.send_message(message, ephemeral=ephemeral)
            return

        if interaction.response.is_done():
            sent = await interaction.followup.send(message, ephemeral=ephemeral, view=view, wait=True)
        else:
            await interaction.response.send_message(message, ephemeral=ephemeral, view=view)
            sent = await interaction.original_response()
        view.set_message(sent)

    @staticmethod
    def build_context(interaction: discord.Interaction) -> MusicContext | None:
        """Guild, channel, and the member's voice channel of an interaction."""
        guild = interaction.guild
        channel = interaction.channel
        if guild is None or channel is None or not isinstance(channel, discord.abc.Messageable):
            return None

        user = interaction.user
        voice = user.voice if isinstance(user, discord.Member) else None
        voice_channel_id = voice.channel.id if voice is not None and voice.channel is not None else None

        return MusicContext(
            guild_id=guild.id,
            text_channel=channel,
            user_id=user.id,
            user_name=getattr(user, "display_name", user.name),
            voice_channel_id=voice_channel_id,
        )

    async def run_action(
        self,
        interaction: discord.Interaction,
        action: MusicAction,
        *,
        defer: bool = False,
        controls: bool = False,
    ) -> None:
        """Run an engine command and render its reply or error in the channel.

        With ``controls`` the reply carries the button panel.
        """
        if interaction.guild is None:
            await self._send(interaction, DiscordUIMessages.STATE_SERVER_ONLY, ephemeral=True)
            return

        context = self.build_context(interaction)
        if context is None:
            await self._send(interaction, DiscordUIMessages.STATE_NOT_TEXT_CHANNEL, ephemeral=True)
            return

        if defer:
            # Resolution and voice joins can exceed the 3-second interaction deadline.
            await interaction.response.defer(thinking=True)

        try:
            reply = await action(context)
        except UserInputError as e:
            await self._send(interaction, e.message, ephemeral=True)
            return
        except DomainError as e:
            logger.warning("Command /%s failed: %s", getattr(interaction.command, "name", "?"), e)
            await self._send(interaction, DiscordUIMessages.PLAY_ERROR.format(error=e.message))
            return

        if reply is None:
            # Nothing to say (member not in voice): drop the deferred "thinking" message.
            if interaction.response.is_done():
                await interaction.delete_original_response()
            return

        view = MusicControlsView(cog=self) if controls else None
        await self._send(interaction, reply, view=view)

    # ─────────────────────────────────────────────────────────────────
    # Playback
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="play", description="Play a song by URL or search query.")
    @app_commands.describe(query="Song URL or search query")
    async def play(self, interaction: discord.Interaction, query: str) -> None:
        await self.run_action(
            interaction, lambda ctx: self.music.play(query, ctx), defer=True, controls=True
        )

    @app_commands.command(name="youtube", description="Search YouTube for a song and play it.")
    @app_commands.describe(query="YouTube URL or search query")
    async def youtube(self, interaction: discord.Interaction, query: str) -> None:
        await self.run_action(
            interaction,
            lambda ctx: self.music.play(query, ctx, force_provider=ProviderKind.YOUTUBE),
            defer=True,
            controls=True,
        )

    @app_commands.command(name="lastplayed", description="Play the last song played in this channel.")
    async def lastplayed(self, interaction: discord.Interaction) -> None:
        await self.run_action(
            interaction, self.music.play_last_played_song, defer=True, controls=True
        )

    @app_commands.command(name="skip", description="Skip the current song.")
    async def skip(self, interaction: discord.Interaction) -> None:
        await self.run_action(interaction, self.music.skip)

    @app_commands.command(name="seek", description="Restart the current song from a timestamp.")
    @app_commands.describe(timestamp="Position such as 90, 1:30 or 1m30s")
    async def seek(self, interaction: discord.Interaction, timestamp: str) -> None:
        await self.run_action(interaction, lambda ctx: self.music.seek(ctx, timestamp))

    @app_commands.command(name="pause", description="Pause the current song.")
    async def pause(self, interaction: discord.Interaction) -> None:
        await self.run_action(interaction, self.music.pause)

    @app_commands.command(name="resume", description="Resume the paused song.")
    async def resume(self, interaction: discord.Interaction) -> None:
        await self.run_action(interaction, self.music.resume)

    @app_commands.command(name="volume", description="Change the playback volume.")
    @app_commands.describe(level="New volume level")
    async def volume(self, interaction: discord.Interaction, level: int) -> None:
        await self.run_action(interaction, lambda ctx: self.music.change_volume(ctx, level))

    @app_commands.command(name="disconnect", description="Stop playing and leave the voice channel.")
    async def disconnect(self, interaction: discord.Interaction) -> None:
        await self.run_action(interaction, self.music.disconnect)

    # ─────────────────────────────────────────────────────────────────
    # Looping
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="loop", description="Repeat the current song.")
    @app_commands.describe(count="How many more times to play it (forever if omitted)")
    async def loop(self, interaction: discord.Interaction, count: int | None = None) -> None:
        await self.run_action(interaction, lambda ctx: self.music.loop(ctx, count))

    @app_commands.command(name="loopall", description="Cycle through the whole queue.")
    async def loopall(self, interaction: discord.Interaction) -> None:
        await self.run_action(interaction, self.music.loop_all)

    @app_commands.command(name="unloop", description="Stop looping.")
    async def unloop(self, interaction: discord.Interaction) -> None:
        await self.run_action(interaction, self.music.unloop)

    # ─────────────────────────────────────────────────────────────────
    # Queue
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="queue", description="Show the current song and the queue.")
    async def queue(self, interaction: discord.Interaction) -> None:
        async def describe(ctx: MusicContext) -> str:
            return self.music.describe_queue(ctx)

        await self.run_action(interaction, describe)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
