"""Button panel attached to play replies: the board's controls one click away."""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from discord_music_board.domain.shared.constants import TimeConstants
from discord_music_board.infrastructure.discord.views.base_view import BaseInteractiveView

if TYPE_CHECKING:
    from ....application.services.music_service import MusicService
    from ..cogs.music_cog import MusicCog


class MusicControlsView(BaseInteractiveView):
    """Last song, play/pause, skip, repeat, repeat all and disconnect buttons.

    Every button goes through the cog's ``run_action`` so button presses get the same
    context checks and reply rendering as the slash commands.
    """

    def __init__(
        self, *, cog: MusicCog, timeout: float | None = TimeConstants.CONTROLS_VIEW_TIMEOUT
    ) -> None:
        super().__init__(timeout=timeout)
        self.cog = cog

    @property
    def music(self) -> MusicService:
        return self.cog.music

    @discord.ui.button(label="\u23ee\ufe0f Last song", style=discord.ButtonStyle.secondary, row=0)
    async def last_song_button(
        self, interaction: discord.Interaction, button: discord.ui.Button[MusicControlsView]
    ) -> None:
        await self.cog.run_action(interaction, self.music.play_last_played_song, defer=True)

    @discord.ui.button(label="\u23ef\ufe0f Play/Pause", style=discord.ButtonStyle.primary, row=0)
    async def play_pause_button(
        self, interaction: discord.Interaction, button: discord.ui.Button[MusicControlsView]
    ) -> None:
        await self.cog.run_action(interaction, self.music.toggle_pause)

    @discord.ui.button(label="\u23ed\ufe0f Skip", style=discord.ButtonStyle.primary, row=0)
    async def skip_button(
        self, interaction: discord.Interaction, button: discord.ui.Button[MusicControlsView]
    ) -> None:
        await self.cog.run_action(interaction, self.music.skip)

    @discord.ui.button(label="\U0001f502 Repeat", style=discord.ButtonStyle.secondary, row=1)
    async def repeat_button(
        self, interaction: discord.Interaction, button: discord.ui.Button[MusicControlsView]
    ) -> None:
        await self.cog.run_action(interaction, self.music.toggle_loop)

    @discord.ui.button(label="\U0001f501 Repeat all", style=discord.ButtonStyle.secondary, row=1)
    async def repeat_all_button(
        self, interaction: discord.Interaction, button: discord.ui.Button[MusicControlsView]
    ) -> None:
        await self.cog.run_action(interaction, self.music.toggle_loop_all)

    @discord.ui.button(label="\u23f9\ufe0f Disconnect", style=discord.ButtonStyle.danger, row=1)
    async def disconnect_button(
        self, interaction: discord.Interaction, button: discord.ui.Button[MusicControlsView]
    ) -> None:
        await self.cog.run_action(interaction, self.music.disconnect)
